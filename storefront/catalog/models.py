# module storefront.catalog.models
"""Modèles du catalogue (table 'products')."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """
    Produit achetable.
    - price: décimal >= 0, rendu en USD
    - is_active: seul un produit actif est achetable
    - image_url / accent_color: présentation uniquement
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    category: str = ""
    is_active: bool = True
    image_url: Optional[str] = None
    accent_color: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductIn(BaseModel):
    """Saisie admin (création / modification)."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, decimal_places=2)
    category: str = Field(..., min_length=1)
    is_active: bool = True
    image_url: Optional[str] = None
    accent_color: Optional[str] = None

    def to_row(self) -> dict:
        data = self.model_dump()
        # La colonne numeric accepte une chaîne: évite les arrondis float
        data["price"] = str(self.price)
        return data
