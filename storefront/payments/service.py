"""
Cas d'usage 'payments': orchestre pricing, shipping, prestataire et repository commandes.

Flux en deux temps, sans état partagé côté serveur entre les deux appels:
  1) create_payment_order: revalide le panier, crée l'intention chez le prestataire.
  2) capture_and_record: revalide le panier, capture, rapproche les montants,
     enregistre la commande (une fois, après la capture, jamais avant).

Unicité: sans ORDER_UNIQUE_PROVIDER_ORDER, une commande en double n'est évitée
que parce que le prestataire refuse une seconde capture du même ordre. Avec la
garde (défaut), un provider_order_id déjà enregistré est refusé localement et
l'index unique de orders.provider_order_id bloque les écritures concurrentes.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
import logging

from storefront import config
from storefront.orders import repository as orders_repository
from storefront.orders.models import Order, OrderStatus
from storefront.utils.best_effort import BestEffort, run_best_effort
from storefront.errors import CaptureFailed, Unauthenticated
from . import pricing
from . import shipping as shipping_rules
from .providers import PaymentProvider, ProviderOrder, get_provider
from .schemas import CartLineIn, ShippingInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureOutcome:
    capture_id: str
    provider_order_id: str
    captured_amount: Any
    expected_total: Any
    amount_matches: bool
    currency_matches: bool
    order: BestEffort[Order]


def _require_identity(user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not user or not user.get("id"):
        raise Unauthenticated()
    return user

def _pairs(items: Iterable[CartLineIn]):
    return [(line.id, line.quantity) for line in items]

# module storefront.payments.service
def create_payment_order(
    *,
    user: Optional[Dict[str, Any]],
    items: Iterable[CartLineIn],
    shipping: ShippingInfo,
    provider: Optional[PaymentProvider] = None,
) -> ProviderOrder:
    """
    Prépare l'intention de paiement à partir d'un panier {id, quantity}.
    - Unauthenticated sans identité appelante.
    - Erreurs du validateur de prix propagées telles quelles.
    - InvalidShipping avec toutes les erreurs par champ.
    - Aucune écriture locale: la commande n'existe qu'après capture.
    """
    caller = _require_identity(user)
    validated = pricing.validate(_pairs(items))
    shipping_rules.validate_shipping(shipping)

    provider = provider or get_provider()
    created = provider.create_order(validated, shipping, config.PAYMENT_CURRENCY)
    logger.info(
        "payments.create_payment_order user_id=%s provider=%s order_id=%s total=%s lines=%s",
        caller.get("id"), getattr(provider, "name", "?"), created.order_id, validated.total, len(validated.lines),
    )
    return created

def capture_and_record(
    *,
    user: Optional[Dict[str, Any]],
    provider_order_id: str,
    items: Iterable[CartLineIn],
    shipping: ShippingInfo,
    provider: Optional[PaymentProvider] = None,
) -> CaptureOutcome:
    """
    Capture les fonds puis enregistre la commande.
    - Revalide le panier (indépendamment de l'appel de création).
    - CaptureFailed si le prestataire refuse: aucune écriture en base.
    - Écart montant capturé / total recalculé > AMOUNT_EPSILON: warning, pas de blocage;
      le montant capturé fait foi pour l'enregistrement.
    - Échec d'écriture après capture: journalisé, l'opération reste un succès.
    """
    caller = _require_identity(user)
    validated = pricing.validate(_pairs(items))

    if config.ORDER_UNIQUE_PROVIDER_ORDER:
        existing = orders_repository.find_order_by_provider_order_id(provider_order_id)
        if existing is not None:
            logger.warning(
                "payments.capture_and_record duplicate provider_order_id=%s existing_order=%s",
                provider_order_id, existing.id,
            )
            raise CaptureFailed("order already recorded for this provider order")

    provider = provider or get_provider()
    capture = provider.capture_order(provider_order_id)
    # Les identifiants enregistrés sont ceux renvoyés par le prestataire
    recorded_order_id = capture.provider_order_id or provider_order_id
    logger.info(
        "payments.capture_and_record captured provider_order_id=%s capture_id=%s amount=%s %s",
        provider_order_id, capture.capture_id, capture.amount, capture.currency,
    )

    amount_matches = abs(capture.amount - validated.total) <= config.AMOUNT_EPSILON
    if not amount_matches:
        # Catalogue modifié entre création et capture, ou montant altéré côté prestataire
        logger.warning(
            "payments.capture_and_record amount mismatch provider_order_id=%s captured=%s expected=%s",
            recorded_order_id, capture.amount, validated.total,
        )
    currency_matches = (capture.currency or "").upper() == config.PAYMENT_CURRENCY
    if not currency_matches:
        logger.warning(
            "payments.capture_and_record currency mismatch provider_order_id=%s captured=%s expected=%s",
            recorded_order_id, capture.currency, config.PAYMENT_CURRENCY,
        )

    record = Order(
        user_email=caller.get("email") or shipping.email,
        total_amount=capture.amount,
        items=validated.snapshot(),
        shipping_address=shipping.model_dump(),
        status=OrderStatus.PAID,
        provider_order_id=recorded_order_id,
        provider_capture_id=capture.capture_id,
    )
    stored = run_best_effort("orders.insert_order", orders_repository.insert_order, record, logger=logger)
    if not stored.ok:
        logger.error(
            "payments.capture_and_record payment captured but order storage failed provider_order_id=%s capture_id=%s",
            recorded_order_id, capture.capture_id,
        )

    return CaptureOutcome(
        capture_id=capture.capture_id,
        provider_order_id=recorded_order_id,
        captured_amount=capture.amount,
        expected_total=validated.total,
        amount_matches=amount_matches,
        currency_matches=currency_matches,
        order=stored,
    )

def client_config(provider: Optional[PaymentProvider] = None) -> Dict[str, Any]:
    """Configuration publique du SDK navigateur (identifiant client, devise)."""
    provider = provider or get_provider()
    return {**provider.public_config(), "currency": config.PAYMENT_CURRENCY}
