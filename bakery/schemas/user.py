# bakery/schemas/user.py
import re
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

_PHONE_RE = re.compile(r"^\+?[0-9 ()-]{7,20}$")


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: EmailStr
    name: str
    surname: str | None = None
    contact_number: str | None = None
    is_admin: bool = False
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Email is owned by Supabase Auth and cannot be changed here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)
    surname: str | None = Field(default=None, max_length=50)
    contact_number: str | None = Field(default=None, max_length=30)

    @field_validator("name", "surname")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("contact_number")
    @classmethod
    def validate_contact(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not _PHONE_RE.match(v):
            raise ValueError("contact number must be 7-20 digits")
        return v
