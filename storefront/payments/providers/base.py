"""
Contrat commun des prestataires de paiement.
Le prestataire possède le cycle de vie de l'intention de paiement; le système
ne fait que déclencher la création puis la capture.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

from storefront.payments.pricing import ValidatedOrder
from storefront.payments.schemas import ShippingInfo


@dataclass(frozen=True)
class ProviderOrder:
    order_id: str
    client_secret: Optional[str] = None


@dataclass(frozen=True)
class CaptureResult:
    capture_id: str
    provider_order_id: str
    amount: Decimal
    currency: str
    status: str


class PaymentProvider(Protocol):
    name: str

    def create_order(self, order: ValidatedOrder, shipping: ShippingInfo, currency: str) -> ProviderOrder:
        """Crée l'intention pour order.total. Lève ProviderUnavailable / ProviderRejected."""
        ...

    def capture_order(self, provider_order_id: str) -> CaptureResult:
        """Capture les fonds. Lève CaptureFailed (déjà capturée, expirée, annulée...)."""
        ...

    def public_config(self) -> dict:
        """Identifiant public pour le SDK navigateur (jamais de secret)."""
        ...
