# bakery/schemas/order.py
import uuid
from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from bakery.schemas.verification import VerificationOutcome


class OrderStatus(str, Enum):
    """
    pending   -> customer uploaded proof, nobody has looked yet
    verified  -> payment proof accepted (AI check or admin)
    completed -> bread handed over at pickup
    """

    PENDING = "pending"
    VERIFIED = "verified"
    COMPLETED = "completed"


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    order_date: datetime
    pickup_location: str
    total_amount: float
    status: OrderStatus
    notes: str | None = None
    payment_proof_path: str | None = None
    verification_result: VerificationOutcome | None = None
    completed_at: datetime | None = None


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    quantity: int
    price: float
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
    verification_summary: str | None = None


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderNotesUpdate(SQLModel):
    """
    Admin payload to attach notes to an order. Empty string clears them.
    """

    model_config = ConfigDict(extra="forbid")

    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class PaymentProofLink(SQLModel):
    """
    Temporary link to the uploaded proof of payment.
    """

    order_id: uuid.UUID
    url: str
    expires_in: int
