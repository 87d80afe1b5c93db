"""
Validation structurelle de l'adresse de livraison et code pays.
"""
from typing import Dict

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront.errors import InvalidShipping
from storefront.payments.schemas import ShippingInfo

_email_adapter = TypeAdapter(EmailStr)

# Longueurs minimales par champ (après trim)
MIN_LENGTHS = {
    "name": (2, "Name is required"),
    "address": (5, "Address is required"),
    "city": (2, "City is required"),
    "country": (2, "Country is required"),
    "zip": (3, "ZIP/Postal code is required"),
}

# Table best-effort; ce n'est pas du géocodage
COUNTRY_CODES = {
    "united states": "US",
    "usa": "US",
    "us": "US",
    "united kingdom": "GB",
    "uk": "GB",
    "canada": "CA",
    "australia": "AU",
    "germany": "DE",
    "france": "FR",
    "japan": "JP",
    "china": "CN",
    "india": "IN",
    "brazil": "BR",
    "mexico": "MX",
}

# module storefront.payments.shipping
def collect_errors(shipping: ShippingInfo) -> Dict[str, str]:
    """Retourne {champ: message} pour chaque champ invalide (tous, pas seulement le premier)."""
    errors: Dict[str, str] = {}
    try:
        _email_adapter.validate_python(shipping.email)
    except PydanticValidationError:
        errors["email"] = "Please enter a valid email"
    for field, (min_len, message) in MIN_LENGTHS.items():
        if len((getattr(shipping, field) or "").strip()) < min_len:
            errors[field] = message
    return errors

def validate_shipping(shipping: ShippingInfo) -> ShippingInfo:
    errors = collect_errors(shipping)
    if errors:
        raise InvalidShipping(errors)
    return shipping

def country_code(country: str) -> str:
    """
    Texte libre -> code ISO alpha-2.
    Repli volontairement approximatif: deux premiers caractères en majuscules.
    """
    value = (country or "").strip()
    return COUNTRY_CODES.get(value.lower()) or value[:2].upper()
