# bakery/schemas/cart.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """Add `quantity` loaves of a bread; merges with an existing line."""

    product_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """Set the quantity of a line. 0 removes the line."""

    quantity: int = Field(ge=0)


class CartItemRead(SQLModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    quantity: int
    snapshot_price: float
    line_total: float
    created_at: datetime


class CartSummary(SQLModel):
    """
    The whole cart as the storefront shows it.

    `item_count` is the number of loaves (sum of quantities), not the
    number of lines.
    """

    items: list[CartItemRead] = []
    item_count: int = 0
    total: float = 0.0
