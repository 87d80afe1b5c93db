"""
Validateur de prix: transforme des lignes (product_id, quantity) en commande
validée à partir du catalogue, seule source de vérité pour les prix.
Aucun effet de bord (lecture + calcul).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict

from storefront.catalog import repository as catalog_repository
from storefront.errors import EmptyCart, InactiveProduct, InvalidQuantity, UnknownProduct

MIN_QUANTITY = 1
MAX_QUANTITY = 100
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Décimal à deux décimales (USD), arrondi commercial."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class ValidatedOrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


class ValidatedOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: Tuple[ValidatedOrderLine, ...]
    total: Decimal

    def snapshot(self) -> List[dict]:
        """Instantané JSON des lignes, stocké tel quel dans orders.items."""
        return [line.model_dump(mode="json") for line in self.lines]


def _is_valid_quantity(quantity) -> bool:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return False
    return MIN_QUANTITY <= quantity <= MAX_QUANTITY

# module storefront.payments.pricing
def validate(lines: Iterable[Tuple[str, int]]) -> ValidatedOrder:
    """
    Valide un panier [(product_id, quantity), ...] contre le catalogue.
    - EmptyCart si aucune ligne.
    - Une seule lecture catalogue pour l'ensemble des IDs.
    - UnknownProduct / InactiveProduct / InvalidQuantity, dans l'ordre des lignes.
    - total = somme(prix catalogue x quantité), quantifié à 0.01.
    Tout prix fourni par le client est ignoré: il n'entre jamais dans le calcul.
    """
    candidates = [(str(pid), qty) for pid, qty in lines]
    if not candidates:
        raise EmptyCart()

    products = {p.id: p for p in catalog_repository.get_products_by_ids(pid for pid, _ in candidates)}

    validated: List[ValidatedOrderLine] = []
    for product_id, quantity in candidates:
        product = products.get(product_id)
        if product is None:
            raise UnknownProduct(product_id)
        if not product.is_active:
            raise InactiveProduct(product_id)
        if not _is_valid_quantity(quantity):
            raise InvalidQuantity(product_id)
        validated.append(
            ValidatedOrderLine(
                product_id=product_id,
                name=product.name,
                unit_price=to_money(product.price),
                quantity=quantity,
            )
        )

    total = to_money(sum((line.unit_price * line.quantity for line in validated), Decimal("0")))
    return ValidatedOrder(lines=tuple(validated), total=total)
