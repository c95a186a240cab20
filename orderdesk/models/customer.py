# orderdesk/models/customer.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Customer(SQLModel, table=True):
    """
    Customer that orders are placed for.

    Customers are never physically deleted (orders reference them);
    `is_active=False` hides them from pickers.
    """

    __tablename__ = "customers"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=150,
        index=True,
    )

    # Chilean RUT, free-form
    tax_id: str | None = Field(default=None, max_length=20, index=True)

    email: str | None = Field(default=None, max_length=150)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=250)
    notes: str | None = None

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
