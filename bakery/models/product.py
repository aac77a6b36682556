# bakery/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Bread on the weekly menu.

    `cost_price` feeds the profit figures in the weekly report and is
    never returned by public endpoints.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name; also the group-by key in reports",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        gt=0,
        description="Unit sale price",
    )

    cost_price: float = Field(
        default=0.0,
        ge=0,
        description="Unit cost to produce",
    )

    image_url: str | None = Field(
        default=None,
        description="Product photo URL",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
