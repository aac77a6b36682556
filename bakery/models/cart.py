# bakery/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class CartItem(SQLModel, table=True):
    """
    One bread in a customer's cart for the coming bake.

    Adding the same bread again bumps `quantity` instead of creating a
    second row. Price and name are copied from the product when the line
    is first created; checkout charges the copied price.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    product_id: uuid.UUID = Field(foreign_key="products.id")
    quantity: int = Field(gt=0)
    snapshot_price: float = Field(description="Unit price when first added")
    product_name: str | None = Field(default=None, description="Name when first added")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
