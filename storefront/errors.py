"""
Taxonomie d'erreurs du flux de paiement.

- CheckoutError porte un status_code HTTP et un message destiné à l'appelant.
- Les erreurs de validation (400) exposent assez de détail pour corriger la saisie.
- Les erreurs prestataire/stockage (500) ne renvoient qu'un message générique;
  le détail (reason/details) reste dans les logs serveur.
"""
from typing import Dict, Optional


class CheckoutError(Exception):
    status_code: int = 500
    public_message: str = "Checkout failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_payload(self) -> Dict[str, object]:
        return {"error": self.message}


class Unauthenticated(CheckoutError):
    status_code = 401
    public_message = "Not authenticated"


# --- Validation (corriger la saisie puis renvoyer) ---

class ValidationError(CheckoutError):
    status_code = 400
    public_message = "Invalid order"


class EmptyCart(ValidationError):
    public_message = "Cart is empty"


class UnknownProduct(ValidationError):
    def __init__(self, product_id: str):
        super().__init__(f"Unknown product: {product_id}")
        self.product_id = product_id


class InactiveProduct(ValidationError):
    def __init__(self, product_id: str):
        super().__init__(f"Product is not available: {product_id}")
        self.product_id = product_id


class InvalidQuantity(ValidationError):
    def __init__(self, product_id: str):
        super().__init__(f"Invalid quantity for product: {product_id}")
        self.product_id = product_id


class InvalidShipping(ValidationError):
    """Toutes les erreurs de livraison, par champ (collectées, pas de court-circuit)."""

    def __init__(self, fields: Dict[str, str]):
        super().__init__("Invalid shipping information")
        self.fields = dict(fields)

    def to_payload(self) -> Dict[str, object]:
        return {"error": self.message, "fields": self.fields}


# --- Prestataire de paiement (message générique côté client) ---

class ProviderError(CheckoutError):
    status_code = 500
    public_message = "Could not start payment"

    def __init__(self, reason: str = ""):
        super().__init__(self.public_message)
        self.reason = reason


class ProviderUnavailable(ProviderError):
    pass


class ProviderRejected(ProviderError):
    def __init__(self, details: str = ""):
        super().__init__(details)
        self.details = details


class CaptureFailed(ProviderError):
    public_message = "Payment failed, please try again"


# --- Stockage ---

class StoreUnavailable(CheckoutError):
    status_code = 500
    public_message = "Service temporarily unavailable"

    def __init__(self, reason: str = ""):
        super().__init__(self.public_message)
        self.reason = reason


class PersistenceFailure(StoreUnavailable):
    """Échec d'écriture de la commande après capture: journalisé, jamais remonté au client."""
