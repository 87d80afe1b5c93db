from typing import Any, Dict
from fastapi import APIRouter

from storefront.catalog import repository as catalog_repository

# module storefront.catalog.views
router = APIRouter(prefix="/api/v1/products", tags=["Catalog API"])

@router.get("")
def list_products() -> Dict[str, Any]:
    """Produits actifs, plus récents d'abord. Les prix affichés sont indicatifs:
    le montant payé est recalculé au checkout."""
    items = catalog_repository.list_active_products()
    return {"items": [p.model_dump(mode="json") for p in items]}
