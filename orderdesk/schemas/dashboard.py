# orderdesk/schemas/dashboard.py
import uuid
from datetime import date, datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from orderdesk.schemas.order import OrderStatus


class DeliveryCounters(SQLModel):
    """
    Counts over facturado orders by derived delivery status.
    """
    model_config = ConfigDict(extra="forbid")

    overdue: int
    pending: int
    delivered: int


class PeriodKpi(SQLModel):
    """
    Orders created in a business-date window, excluding nulo.
    """
    model_config = ConfigDict(extra="forbid")

    since: date
    order_count: int
    total: float


class Kpis(SQLModel):
    model_config = ConfigDict(extra="forbid")

    daily: PeriodKpi
    weekly: PeriodKpi
    monthly: PeriodKpi


class TopProduct(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    name: str
    total_quantity: int
    total_amount: float


class TopCustomer(SQLModel):
    model_config = ConfigDict(extra="forbid")

    customer_id: uuid.UUID
    name: str
    order_count: int
    total_amount: float


class LowStockProduct(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    name: str
    sku: str
    stock_on_hand: int
    min_stock: int


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    order_number: str
    created_at: datetime
    customer_id: uuid.UUID
    total: float
    status: OrderStatus


class DashboardMetrics(SQLModel):
    """
    Full payload for the dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    orders_by_status: dict[str, int]
    delivery: DeliveryCounters
    kpis: Kpis
    top_products: list[TopProduct]
    top_customers: list[TopCustomer]
    low_stock: list[LowStockProduct]
    latest_orders: list[LatestOrderSummary]
