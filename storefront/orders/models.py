# module storefront.orders.models
"""Modèle des commandes enregistrées (table 'orders')."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(BaseModel):
    """
    Commande écrite une seule fois, à la capture réussie.
    items / total_amount / shipping_address sont des instantanés figés;
    seul status évolue ensuite (transition admin).
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    user_email: str
    total_amount: Decimal
    items: List[Dict[str, Any]]
    shipping_address: Dict[str, Any]
    status: OrderStatus = OrderStatus.PAID
    provider_order_id: Optional[str] = None
    provider_capture_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump(mode="json", exclude={"id", "created_at"})
        row["total_amount"] = str(self.total_amount)
        return row


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
