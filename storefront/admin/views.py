from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.admin import service as admin_service
from storefront.auth.service import setup_first_admin
from storefront.catalog.models import ProductIn
from storefront.orders.models import OrderStatusUpdate
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_admin, require_user

# module storefront.admin.views
router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])

# Amorçage du premier admin (utilisateur simplement authentifié)
@router.post("/setup", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def setup_admin(user: Dict[str, Any] = Depends(require_user)):
    return setup_first_admin(user)

# API JSON: produits
@router.get("/products")
def admin_list_products(user: dict = Depends(require_admin)):
    items = admin_service.list_products()
    return {"items": [p.model_dump(mode="json") for p in items]}

@router.post("/products", status_code=201, dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
def admin_create_product(body: ProductIn, user: dict = Depends(require_admin)):
    created = admin_service.create_product(body)
    if not created:
        raise HTTPException(status_code=500, detail="Failed to create product")
    return {"item": created.model_dump(mode="json")}

@router.put("/products/{product_id}")
def admin_update_product(product_id: str, body: ProductIn, user: dict = Depends(require_admin)):
    updated = admin_service.update_product(product_id, body)
    if not updated:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"item": updated.model_dump(mode="json")}

@router.post("/products/{product_id}/toggle")
def admin_toggle_product(product_id: str, user: dict = Depends(require_admin)):
    updated = admin_service.toggle_product(product_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"item": updated.model_dump(mode="json")}

@router.delete("/products/{product_id}")
def admin_delete_product(product_id: str, user: dict = Depends(require_admin)):
    if not admin_service.delete_product(product_id):
        raise HTTPException(status_code=500, detail="Failed to delete product")
    return {"ok": True}

# API JSON: commandes
@router.get("/orders")
def admin_list_orders(limit: int = Query(default=100, ge=1, le=500), user: dict = Depends(require_admin)):
    items = admin_service.list_orders(limit=limit)
    return {"items": [o.model_dump(mode="json") for o in items]}

@router.patch("/orders/{order_id}")
def admin_update_order_status(order_id: str, body: OrderStatusUpdate, user: dict = Depends(require_admin)):
    updated = admin_service.update_order_status(order_id, body.status)
    if not updated:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"item": updated.model_dump(mode="json")}
