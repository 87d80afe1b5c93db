# module storefront.payments.views

"""Endpoints du checkout.
- /create-order: revalide le panier et crée l'intention chez le prestataire (authentifié, rate-limité).
- /capture-order: capture le paiement approuvé puis enregistre la commande.
- /config: identifiant public du prestataire pour le SDK navigateur.
Les erreurs métier (CheckoutError) sont rendues par les handlers de app_setup.exceptions.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends

from storefront.utils.security import require_user
from storefront.utils.rate_limit import optional_rate_limit
from storefront.payments import service as payments_service
from storefront.payments.schemas import (
    CaptureOrderRequest,
    CaptureOrderResponse,
    CreateOrderRequest,
    CreateOrderResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


@router.post("/create-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_order(body: CreateOrderRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Entrée: {items: [{id, quantity}], shipping: {...}} -> {orderId}.
    Le prix n'est pas accepté dans la requête: il vient du catalogue.
    """
    created = payments_service.create_payment_order(user=user, items=body.items, shipping=body.shipping)
    response = CreateOrderResponse(order_id=created.order_id, client_secret=created.client_secret)
    return response.model_dump(by_alias=True, exclude_none=True)


@router.post("/capture-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def capture_order(body: CaptureOrderRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Entrée: {orderId, items, shipping} -> {success: true, captureId}.
    Succès dès que les fonds sont capturés, même si l'écriture locale a échoué.
    """
    outcome = payments_service.capture_and_record(
        user=user,
        provider_order_id=body.order_id,
        items=body.items,
        shipping=body.shipping,
    )
    logger.info(
        "payments.capture_order done provider_order_id=%s recorded=%s amount_matches=%s",
        outcome.provider_order_id, outcome.order.ok, outcome.amount_matches,
    )
    return CaptureOrderResponse(capture_id=outcome.capture_id).model_dump(by_alias=True)


@router.get("/config")
def payment_config() -> Dict[str, Any]:
    """Identifiant client public (PayPal client id / clé publique Stripe) et devise."""
    return payments_service.client_config()
