# orderdesk/models/order.py
import uuid
from datetime import datetime, date, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    Lifecycle (see orderdesk.services.order_lifecycle):
      pendiente -> compra -> facturado -> (delivered) | nulo

    Orders are never deleted; `nulo` is the cancelled state.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        max_length=40,
        index=True,
        description="Human-facing identifier (caller supplied or generated)",
    )

    customer_id: uuid.UUID = Field(
        foreign_key="customers.id",
        index=True,
    )

    # pendiente | compra | facturado | nulo
    status: str = Field(
        default="pendiente",
        index=True,
        description="Order status lifecycle",
    )

    delivery_due: date = Field(
        description="Date the customer expects delivery",
    )

    delivered_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="Set once when a facturado order is delivered (UTC)",
    )

    location: str | None = Field(
        default=None,
        max_length=200,
        description="Delivery place, set by billing",
    )

    notes: str | None = Field(
        default=None,
        description="Optional observations",
    )

    # Sum of quantity * unit_price over all lines
    total: float = Field(default=0.0)

    created_by: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    `position` keeps lines in the order they were submitted.
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

    position: int = Field(default=0, ge=0)

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_of_measure: str = Field(default="unidad", max_length=30)

    unit_price: float = Field(
        ge=0,
        description="Unit price at time of order",
    )

    # Snapshot so the line still reads correctly if the product is renamed
    product_name: str | None = None

    brand: str | None = None
    format: str | None = None
    notes: str | None = None
