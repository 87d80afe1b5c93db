"""
Accès aux données des commandes (table 'orders'), toujours via service-role.
"""
from typing import List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.orders.models import Order, OrderStatus
from storefront.errors import PersistenceFailure, StoreUnavailable

logger = logging.getLogger(__name__)

TABLE = "orders"

# module storefront.orders.repository
def insert_order(order: Order) -> Order:
    """
    Insère une commande et retourne la ligne écrite.
    - Lève PersistenceFailure si l'écriture échoue (dont violation d'unicité
      sur provider_order_id); l'appelant décide de la politique.
    """
    row = order.to_row()
    try:
        res = supabase_client.get_service_supabase().table(TABLE).insert(row).execute()
    except Exception as e:
        raise PersistenceFailure(str(e)) from e
    rows = getattr(res, "data", None) or []
    return Order.model_validate(rows[0]) if rows else order

def find_order_by_provider_order_id(provider_order_id: str) -> Optional[Order]:
    if not provider_order_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("provider_order_id", provider_order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.find_order_by_provider_order_id failed id=%s", provider_order_id)
        raise StoreUnavailable(str(e)) from e
    rows = res.data or []
    return Order.model_validate(rows[0]) if rows else None

def list_orders(limit: int = 100) -> List[Order]:
    """Commandes pour l'admin, plus récentes d'abord."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.list_orders failed")
        raise StoreUnavailable(str(e)) from e
    return [Order.model_validate(row) for row in (res.data or [])]

def update_order_status(order_id: str, status: OrderStatus) -> Optional[Order]:
    """Seul le statut est modifiable après écriture. None si aucune ligne ne correspond."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .update({"status": status.value})
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.update_order_status failed id=%s status=%s", order_id, status)
        raise StoreUnavailable(str(e)) from e
    rows = getattr(res, "data", None) or []
    return Order.model_validate(rows[0]) if rows else None
