# bakery/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductRead(SQLModel):
    """
    Product representation for customers. Never carries cost_price.
    """

    id: uuid.UUID
    name: str
    description: str | None = None
    price: float
    image_url: str | None = None
    is_active: bool
    created_at: datetime


class ProductAdminRead(ProductRead):
    """
    Product representation for admins, including production cost.
    """

    cost_price: float


class ProductCreate(SQLModel):
    """
    Payload for creating a product.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None
    price: float = Field(gt=0)
    cost_price: float = Field(default=0.0, ge=0)
    image_url: str | None = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    cost_price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v
