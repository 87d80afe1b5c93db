"""
Schémas d'entrée/sortie des endpoints de paiement.
Enregistrements stricts (extra="forbid"): un champ inconnu ou manquant est rejeté
à la frontière. Le prix d'une ligne de panier est toléré mais jamais lu.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class CartLineIn(BaseModel):
    """Ligne de panier soumise: identifiant produit + quantité.
    name/price sont tolérés (format du panier navigateur) mais ignorés: le prix vient du catalogue.
    """
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    # Bornes [1, 100] vérifiées par le validateur de prix (InvalidQuantity)
    quantity: StrictInt
    # Métadonnées d'affichage du panier client: acceptées, jamais lues
    name: Optional[str] = Field(None, exclude=True)
    price: Optional[Any] = Field(None, exclude=True)


class ShippingInfo(BaseModel):
    """Adresse de livraison brute; la validation métier est dans payments.shipping."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: str
    name: str
    address: str
    city: str
    country: str
    zip: str


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: List[CartLineIn]
    shipping: ShippingInfo


class CaptureOrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    order_id: str = Field(..., alias="orderId", min_length=1)
    items: List[CartLineIn]
    shipping: ShippingInfo


class CreateOrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    client_secret: Optional[str] = Field(None, alias="clientSecret")


class CaptureOrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    capture_id: str = Field(..., alias="captureId")
