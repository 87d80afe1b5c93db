"""
Accès aux données du catalogue (table 'products').
Les lectures utilisées par le checkout lèvent StoreUnavailable plutôt que de
renvoyer une liste vide: un catalogue injoignable ne doit pas ressembler à un
produit inconnu.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.catalog.models import Product
from storefront.errors import StoreUnavailable

logger = logging.getLogger(__name__)

TABLE = "products"

# module storefront.catalog.repository
def get_products_by_ids(ids: Iterable[str]) -> List[Product]:
    """
    Récupère les produits par leurs IDs en une seule requête (pas de N+1).
    - Retourne [] si ids vide.
    - Lève StoreUnavailable si Supabase échoue.
    """
    id_list = sorted({str(i) for i in ids if i})
    if not id_list:
        return []
    try:
        res = (
            supabase_client.get_supabase()
            .table(TABLE)
            .select("*")
            .in_("id", id_list)
            .execute()
        )
    except Exception as e:
        logger.exception("catalog.repository.get_products_by_ids failed ids=%s", id_list)
        raise StoreUnavailable(str(e)) from e
    return [Product.model_validate(row) for row in (res.data or [])]

def list_active_products() -> List[Product]:
    """Produits actifs, plus récents d'abord (page boutique)."""
    try:
        res = (
            supabase_client.get_supabase()
            .table(TABLE)
            .select("*")
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("catalog.repository.list_active_products failed")
        raise StoreUnavailable(str(e)) from e
    return [Product.model_validate(row) for row in (res.data or [])]

def list_products() -> List[Product]:
    """Tous les produits (admin), actifs ou non."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("catalog.repository.list_products failed")
        raise StoreUnavailable(str(e)) from e
    return [Product.model_validate(row) for row in (res.data or [])]

def get_product(product_id: str) -> Optional[Product]:
    if not product_id:
        return None
    rows = get_products_by_ids([product_id])
    return rows[0] if rows else None

def upsert_product(data: Dict[str, Any], product_id: Optional[str] = None) -> Optional[Product]:
    """
    Crée (product_id absent) ou met à jour un produit via service-role.
    Retourne le produit écrit, ou None en cas d'échec.
    """
    try:
        table = supabase_client.get_service_supabase().table(TABLE)
        if product_id:
            res = table.update(data).eq("id", product_id).execute()
        else:
            res = table.insert(data).execute()
        rows = getattr(res, "data", None) or []
        return Product.model_validate(rows[0]) if rows else None
    except Exception:
        logger.exception("catalog.repository.upsert_product failed id=%s data=%s", product_id, data)
        return None

def set_product_active(product_id: str, is_active: bool) -> Optional[Product]:
    return upsert_product({"is_active": bool(is_active)}, product_id=product_id)

def delete_product(product_id: str) -> bool:
    try:
        supabase_client.get_service_supabase().table(TABLE).delete().eq("id", product_id).execute()
        return True
    except Exception:
        logger.exception("catalog.repository.delete_product failed id=%s", product_id)
        return False
