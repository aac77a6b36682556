# bakery/models/order.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order for the weekly bake.

    Columns:
      - id, user_id, order_date, pickup_location, total_amount,
        status, notes, payment_proof_path, verification_result,
        completed_at
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    order_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="When the customer finalized checkout (UTC)",
    )

    # Stored verbatim: reports group on this exact label
    pickup_location: str = Field(
        description="Pickup location label chosen at checkout",
    )

    total_amount: float = Field(
        description="Sum of line items at time of order",
    )

    # pending | verified | completed
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    notes: str | None = Field(
        default=None,
        description="Admin notes",
    )

    payment_proof_path: str | None = Field(
        default=None,
        description="Object path in the payment-proof bucket",
    )

    # Serialized VerificationOutcome (see schemas/verification.py)
    verification_result: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )

    completed_at: datetime | None = Field(
        default=None,
        description="Set when an admin marks the order completed",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    Columns:
      - id, order_id, product_id, quantity, price
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    # Copied from the cart so historical totals never move
    price: float = Field(
        description="Unit price at time of order",
    )
