# orderdesk/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match the identity provider's user id (UUID from JWT "sub")

    Role:
      - "admin" | "facturador" | "vendedor"
      - capabilities per role live in orderdesk.core.permissions

    Passwords are owned by the identity provider. We only mirror identity,
    name, and application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the identity provider user id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the identity provider",
    )

    name: str = Field(
        max_length=100,
        description="Display name; first part of email by default",
    )

    role: str = Field(
        default="vendedor",
        index=True,
        description="Application role: admin | facturador | vendedor",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
