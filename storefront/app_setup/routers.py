"""
Registre central des routers.
- API v1: products (public), payments, visits
- Admin: /api/v1/admin
- Health: /health
"""
from fastapi import FastAPI
from storefront.catalog.views import router as catalog_router
from storefront.payments.views import router as payments_router
from storefront.visits.views import router as visits_router
from storefront.admin.views import router as admin_router
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """Agrège tous les routers; les préfixes évitent les conflits de chemins."""
    # API v1
    app.include_router(catalog_router)
    app.include_router(payments_router)
    app.include_router(visits_router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
