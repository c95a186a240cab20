# orderdesk/schemas/order.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["pendiente", "compra", "facturado", "nulo"]
DeliveryStatus = Literal["entregado", "vencido", "pendiente"]
ResolutionMode = Literal["merge", "ignore"]


def _strip_or_none(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class OrderItemCreate(SQLModel):
    """
    One incoming line.

    unit_price / unit_of_measure / brand / format default to the
    product's values when omitted. Quantity is checked by the order
    service so that a non-positive value is reported as a
    validation_error like the other business rules.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int
    unit_price: float | None = Field(default=None, gt=0)
    unit_of_measure: str | None = Field(default=None, max_length=30)
    brand: str | None = Field(default=None, max_length=100)
    format: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("unit_of_measure", "brand", "format", "notes")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class OrderCreate(SQLModel):
    """
    Payload for creating an order.

    Backend derives:
      - created_by from token
      - status = 'pendiente'
      - order_number if not given
      - total from the lines

    resolution_mode:
      - None   : refuse with a duplicate conflict if a same-day order of
                 this customer already has one of the products
      - merge  : add quantities onto the most recent matching order
      - ignore : create a new order anyway
    """

    model_config = ConfigDict(extra="forbid")

    customer_id: uuid.UUID
    items: list[OrderItemCreate]
    delivery_due: date
    order_number: str | None = Field(default=None, max_length=40)
    notes: str | None = Field(default=None, max_length=1000)
    resolution_mode: ResolutionMode | None = None

    @field_validator("order_number", "notes")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    position: int
    quantity: int
    unit_of_measure: str
    unit_price: float
    brand: str | None = None
    format: str | None = None
    notes: str | None = None
    line_total: float


class OrderRead(SQLModel):
    """
    Order without items, plus derived delivery fields.
    """

    id: uuid.UUID
    order_number: str
    customer_id: uuid.UUID
    customer_name: str | None = None
    status: OrderStatus
    delivery_due: date
    delivered_at: datetime | None
    location: str | None
    notes: str | None
    total: float
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime

    delivery_status: DeliveryStatus | None = None
    can_nullify: bool = False


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderCreateResult(SQLModel):
    """
    Outcome of a successful create call.

      - created: the new order, if any line was not merged
      - merged : existing orders that received merged quantities
    """

    created: OrderWithItemsRead | None = None
    merged: list[OrderWithItemsRead] = []


class DuplicateLine(SQLModel):
    """
    One conflicting incoming item and the existing line it collides with.
    """

    order_id: uuid.UUID
    order_number: str
    product_id: uuid.UUID
    product_name: str | None = None
    existing_qty: int
    new_qty: int
    unit_of_measure: str


class DuplicateConflict(SQLModel):
    """
    Returned (not raised) when a create request needs a merge/ignore decision.

    Serialized by the router as HTTP 409.
    """

    kind: Literal["duplicate_conflict"] = "duplicate_conflict"
    message: str = "Same-day order already contains these products"
    duplicates: list[DuplicateLine]


class OrderStatusUpdate(SQLModel):
    """
    Payload to overwrite order status (manage_orders capability).
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderUpdate(SQLModel):
    """
    Partial edit of an order.

      - status      : same rules as the status endpoint
      - location    : manage_orders
      - customer_id : admin only
      - notes       : anyone who can see the order
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    location: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=1000)
    customer_id: uuid.UUID | None = None

    @field_validator("location", "notes")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        # Empty string clears the field, so keep "" distinct from None
        return v.strip()
