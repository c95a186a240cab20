# orderdesk/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    unit_of_measure / brand / format are copied onto order lines as
    defaults when the caller does not provide them.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=150,
        index=True,
        description="Display name",
    )

    sku: str = Field(
        max_length=64,
        unique=True,
        index=True,
        description="Stock keeping unit (unique)",
    )

    brand: str | None = Field(default=None, max_length=100)
    format: str | None = Field(
        default=None,
        max_length=100,
        description="Presentation, e.g. 'caja 12 un.'",
    )
    category: str | None = Field(default=None, max_length=50, index=True)

    unit_of_measure: str = Field(
        default="unidad",
        max_length=30,
    )

    unit_price: float = Field(
        gt=0,
        description="Unit price (CLP)",
    )

    stock_on_hand: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    min_stock: int = Field(
        default=0,
        ge=0,
        description="Low-stock threshold for the dashboard",
    )

    is_active: bool = Field(
        default=True,
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
