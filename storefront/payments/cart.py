"""
Conteneur d'état du panier client (pas de Stripe, pas de DB).

Le panier garde des métadonnées d'affichage (nom, prix, image) pour le rendu
uniquement. Seules les paires {id, quantity} sortent vers le serveur; le prix
affiché n'est jamais une entrée du calcul de total.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CartItem:
    product_id: str
    quantity: int
    name: str = ""
    display_price: Decimal = Decimal("0")
    image_url: Optional[str] = None


@dataclass(frozen=True)
class CartState:
    items: Tuple[CartItem, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def display_total(self) -> Decimal:
        """Total d'affichage seulement; le serveur recalcule depuis le catalogue."""
        return sum((item.display_price * item.quantity for item in self.items), Decimal("0"))


# module storefront.payments.cart
def add_item(state: CartState, product: Dict[str, Any], quantity: int = 1) -> CartState:
    """Ajoute un produit (ou incrémente sa quantité s'il est déjà présent)."""
    product_id = str(product.get("id") or "").strip()
    if not product_id or quantity <= 0:
        return state
    items = list(state.items)
    for idx, item in enumerate(items):
        if item.product_id == product_id:
            items[idx] = replace(item, quantity=item.quantity + quantity)
            return CartState(items=tuple(items))
    items.append(
        CartItem(
            product_id=product_id,
            quantity=quantity,
            name=product.get("name") or "",
            display_price=Decimal(str(product.get("price") or 0)),
            image_url=product.get("image_url"),
        )
    )
    return CartState(items=tuple(items))

def remove_item(state: CartState, product_id: str) -> CartState:
    return CartState(items=tuple(i for i in state.items if i.product_id != product_id))

def set_quantity(state: CartState, product_id: str, quantity: int) -> CartState:
    """Quantité <= 0 retire la ligne; aucune borne haute ici (vérifiée au checkout)."""
    if quantity <= 0:
        return remove_item(state, product_id)
    return CartState(items=tuple(
        replace(i, quantity=quantity) if i.product_id == product_id else i
        for i in state.items
    ))

def clear(state: CartState) -> CartState:
    return CartState()

def to_checkout_lines(state: CartState) -> List[Dict[str, Any]]:
    """Payload envoyé au checkout: [{"id", "quantity"}], sans prix ni nom."""
    return [{"id": i.product_id, "quantity": i.quantity} for i in state.items]
