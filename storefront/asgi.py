"""
ASGI entrypoint: expose `app` pour les process managers / déploiements
(ex: `uvicorn storefront.asgi:app`). Toute la configuration est dans storefront.app_setup.
"""

from storefront.app import app

__all__ = ["app"]
