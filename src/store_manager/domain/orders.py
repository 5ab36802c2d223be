"""Domain models for completed in-store sales."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from store_manager.domain.sessions import CartLine

CURRENCY = "PKR"


@dataclass(frozen=True)
class OrderRecord:
    """Represents a persisted order."""

    id: str
    customer_name: str
    items: list[CartLine]
    total: float
    status: str
    payment_method: str
    created_at: datetime


class ReceiptCustomer(BaseModel):
    """Customer block printed on a receipt."""

    name: str
    id: str


class ReceiptLine(BaseModel):
    """Item row printed on a receipt."""

    id: str
    name: str
    price: float
    quantity: int
    image: str | None = None


class ReceiptPayload(BaseModel):
    """Print-ready bill staged for the receipt view."""

    order_id: str
    customer: ReceiptCustomer
    items: list[ReceiptLine]
    total: float
    date: datetime
