"""
Cas d'usage admin: gestion du catalogue et du statut des commandes.
Les contrôles d'accès sont faits en amont (require_admin); ici seulement la logique.
"""
from typing import List, Optional
import logging

from storefront.catalog import repository as catalog_repository
from storefront.catalog.models import Product, ProductIn
from storefront.orders import repository as orders_repository
from storefront.orders.models import Order, OrderStatus

logger = logging.getLogger(__name__)

# --- Produits ---

def list_products() -> List[Product]:
    return catalog_repository.list_products()

def create_product(data: ProductIn) -> Optional[Product]:
    created = catalog_repository.upsert_product(data.to_row())
    if created:
        logger.info("admin.service.create_product id=%s name=%s", created.id, created.name)
    return created

def update_product(product_id: str, data: ProductIn) -> Optional[Product]:
    return catalog_repository.upsert_product(data.to_row(), product_id=product_id)

def toggle_product(product_id: str) -> Optional[Product]:
    """
    Inverse is_active.
    - None si le produit est introuvable ou si l'écriture échoue.
    """
    current = catalog_repository.get_product(product_id)
    if current is None:
        return None
    return catalog_repository.set_product_active(product_id, not current.is_active)

def delete_product(product_id: str) -> bool:
    return catalog_repository.delete_product(product_id)

# --- Commandes ---

def list_orders(limit: int = 100) -> List[Order]:
    return orders_repository.list_orders(limit=limit)

def update_order_status(order_id: str, status: OrderStatus) -> Optional[Order]:
    """Transition libre (toute valeur de l'énumération), pas de machine à états."""
    updated = orders_repository.update_order_status(order_id, status)
    if updated:
        logger.info("admin.service.update_order_status id=%s status=%s", order_id, status.value)
    return updated
