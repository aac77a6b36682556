# bakery/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent customer profile.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Admin access is decided by the ADMIN_EMAILS allowlist, so there is
    no role column. Supabase Auth keeps the password in its own schema.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    name: str = Field(
        max_length=50,
        description="First name; first part of email by default",
    )

    surname: str | None = Field(
        default=None,
        max_length=50,
    )

    contact_number: str | None = Field(
        default=None,
        max_length=30,
        description="Phone number used to reach the customer about pickup",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
