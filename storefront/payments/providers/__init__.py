"""
Prestataires de paiement: PayPal (défaut) ou Stripe selon PAYMENT_PROVIDER.
"""
from storefront import config
from storefront.errors import ProviderUnavailable
from .base import CaptureResult, PaymentProvider, ProviderOrder
from .paypal_client import PayPalProvider
from .stripe_client import StripeProvider

PROVIDERS = {
    "paypal": PayPalProvider,
    "stripe": StripeProvider,
}

def get_provider(name: str = "") -> PaymentProvider:
    key = (name or config.PAYMENT_PROVIDER).lower()
    provider_cls = PROVIDERS.get(key)
    if provider_cls is None:
        raise ProviderUnavailable(f"unknown PAYMENT_PROVIDER {key}")
    return provider_cls()

__all__ = [
    "CaptureResult",
    "PaymentProvider",
    "ProviderOrder",
    "PayPalProvider",
    "StripeProvider",
    "get_provider",
]
