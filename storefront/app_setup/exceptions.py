"""
Gestionnaires d'exceptions (utilisés par la factory).
- CheckoutError: code HTTP porté par l'exception, corps {"error": ...} (+ "fields" pour la livraison).
- HTTPException: même forme {"error": detail} pour tous les clients.
- RequestValidationError: schéma strict violé (champ inconnu, manquant, mal typé) -> 400.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from storefront.errors import CheckoutError, ProviderError, StoreUnavailable

logger = logging.getLogger(__name__)

def _field_errors(exc: RequestValidationError) -> dict:
    fields = {}
    for err in exc.errors():
        # loc = ("body", "items", 0, "price") -> "items.0.price"
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        fields[".".join(loc) or "body"] = err.get("msg", "invalid")
    return fields

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers JSON.
    - Les erreurs prestataire/stockage sont journalisées avec leur raison interne,
      le client ne reçoit que le message générique.
    """
    @app.exception_handler(CheckoutError)
    async def checkout_error(request: Request, exc: CheckoutError):
        if isinstance(exc, (ProviderError, StoreUnavailable)):
            logger.error(
                "checkout failed path=%s type=%s reason=%s",
                request.url.path, type(exc).__name__, getattr(exc, "reason", ""),
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request", "fields": _field_errors(exc)})
