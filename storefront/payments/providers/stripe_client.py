"""
Adaptateur Stripe: PaymentIntent en capture manuelle.
- create_order: PaymentIntent.create(capture_method="manual") pour le total validé;
  le navigateur confirme avec client_secret (état requires_capture).
- capture_order: PaymentIntent.capture(id); montant capturé = amount_received.
"""
import json
from decimal import Decimal
from typing import Any, Dict
import logging

import stripe

from storefront import config
from storefront.errors import CaptureFailed, ProviderRejected, ProviderUnavailable
from storefront.payments.pricing import ValidatedOrder
from storefront.payments.schemas import ShippingInfo
from storefront.payments.shipping import country_code
from .base import CaptureResult, ProviderOrder

logger = logging.getLogger(__name__)

# Limite Stripe: 500 caractères par valeur de metadata
METADATA_VALUE_MAX = 500

# module storefront.payments.providers.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Lève ProviderUnavailable si STRIPE_SECRET_KEY est absente.
    """
    if not config.STRIPE_SECRET_KEY:
        raise ProviderUnavailable("STRIPE_SECRET_KEY manquant")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def to_minor_units(amount: Decimal) -> int:
    """Montant en centimes (USD/EUR: 2 décimales)."""
    return int((amount * 100).to_integral_value())

def make_metadata(order: ValidatedOrder) -> Dict[str, str]:
    """
    Lignes validées sérialisées, tronquées pour respecter les limites Stripe.
    """
    lines = [{"id": l.product_id, "q": l.quantity, "p": str(l.unit_price)} for l in order.lines]
    return {"items": json.dumps(lines)[:METADATA_VALUE_MAX], "total": str(order.total)}

def build_intent_params(order: ValidatedOrder, shipping: ShippingInfo, currency: str) -> Dict[str, Any]:
    return {
        "amount": to_minor_units(order.total),
        "currency": currency.lower(),
        "capture_method": "manual",
        "receipt_email": shipping.email,
        "metadata": make_metadata(order),
        "shipping": {
            "name": shipping.name,
            "address": {
                "line1": shipping.address,
                "city": shipping.city,
                "postal_code": shipping.zip,
                "country": country_code(shipping.country),
            },
        },
    }


class StripeProvider:
    name = "stripe"

    def create_order(self, order: ValidatedOrder, shipping: ShippingInfo, currency: str) -> ProviderOrder:
        require_stripe()
        try:
            intent = stripe.PaymentIntent.create(**build_intent_params(order, shipping, currency))
        except stripe.APIConnectionError as e:
            logger.exception("stripe.create_order connection error")
            raise ProviderUnavailable(str(e)) from e
        except stripe.StripeError as e:
            logger.error("stripe.create_order rejected code=%s", getattr(e, "code", None))
            raise ProviderRejected(getattr(e, "code", None) or str(e)) from e
        logger.info("stripe.create_order created id=%s total=%s", intent["id"], order.total)
        return ProviderOrder(order_id=intent["id"], client_secret=intent.get("client_secret"))

    def capture_order(self, provider_order_id: str) -> CaptureResult:
        try:
            require_stripe()
            intent = stripe.PaymentIntent.capture(provider_order_id)
        except ProviderUnavailable as e:
            raise CaptureFailed(e.reason) from e
        except stripe.StripeError as e:
            # ex: payment_intent_unexpected_state (déjà capturée / annulée)
            logger.error("stripe.capture_order failed id=%s code=%s", provider_order_id, getattr(e, "code", None))
            raise CaptureFailed(getattr(e, "code", None) or str(e)) from e

        if intent.get("status") != "succeeded":
            raise CaptureFailed(f"capture not completed status={intent.get('status')}")
        received = Decimal(int(intent.get("amount_received") or 0)) / 100
        return CaptureResult(
            capture_id=str(intent.get("latest_charge") or intent["id"]),
            provider_order_id=intent["id"],
            amount=received,
            currency=str(intent.get("currency") or "").upper(),
            status=intent.get("status"),
        )

    def public_config(self) -> dict:
        return {"provider": self.name, "clientId": config.STRIPE_PUBLIC_KEY}
