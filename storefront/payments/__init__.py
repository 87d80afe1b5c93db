"""
Module 'payments' (feature-first): point d'entrée public.
Réunit panier client, validation des prix et de la livraison, prestataires et services.
"""

from .cart import CartState, add_item, remove_item, set_quantity, clear, to_checkout_lines
from .pricing import ValidatedOrder, ValidatedOrderLine, validate
from .shipping import collect_errors, validate_shipping, country_code
from .providers import get_provider
from .service import create_payment_order, capture_and_record, client_config

__all__ = [
    # cart
    "CartState",
    "add_item",
    "remove_item",
    "set_quantity",
    "clear",
    "to_checkout_lines",
    # pricing
    "ValidatedOrder",
    "ValidatedOrderLine",
    "validate",
    # shipping
    "collect_errors",
    "validate_shipping",
    "country_code",
    # prestataires
    "get_provider",
    # services
    "create_payment_order",
    "capture_and_record",
    "client_config",
]
