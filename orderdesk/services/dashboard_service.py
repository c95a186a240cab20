# orderdesk/services/dashboard_service.py
from datetime import date, datetime, timedelta
from typing import Callable

from sqlmodel import Session

from orderdesk.core.clock import as_utc, business_date, business_day_bounds, utcnow
from orderdesk.repositories.dashboard_repo import DashboardRepository
from orderdesk.schemas.dashboard import (
    DashboardMetrics,
    DeliveryCounters,
    Kpis,
    LatestOrderSummary,
    LowStockProduct,
    PeriodKpi,
    TopCustomer,
    TopProduct,
)
from orderdesk.services import order_lifecycle as lifecycle


class DashboardService:
    """
    Orchestrates aggregated dashboard metrics.
    """

    def __init__(
        self,
        repo: DashboardRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repo = repo
        self.clock = clock

    def _period(self, session: Session, today: date, days: int) -> PeriodKpi:
        # Window covers `days` business dates ending today.
        since_day = today - timedelta(days=days - 1)
        start, _ = business_day_bounds(since_day)
        count, total = self.repo.period_totals(session, start)
        return PeriodKpi(since=since_day, order_count=count, total=total)

    def _delivery_counters(self, session: Session, now: datetime) -> DeliveryCounters:
        counters = {"vencido": 0, "pendiente": 0, "entregado": 0}
        for order in self.repo.facturado_orders(session):
            label = lifecycle.delivery_status(order, now)
            if label in counters:
                counters[label] += 1
        return DeliveryCounters(
            overdue=counters["vencido"],
            pending=counters["pendiente"],
            delivered=counters["entregado"],
        )

    def get_metrics(
        self,
        session: Session,
        top_n: int = 5,
        latest_n: int = 5,
        low_stock_n: int = 10,
    ) -> DashboardMetrics:
        now = self.clock()
        today = business_date(now)

        kpis = Kpis(
            daily=self._period(session, today, 1),
            weekly=self._period(session, today, 7),
            monthly=self._period(session, today, 30),
        )

        top_products = [
            TopProduct(
                product_id=product_id,
                name=name,
                total_quantity=int(total_quantity or 0),
                total_amount=float(total_amount or 0.0),
            )
            for product_id, name, total_quantity, total_amount in self.repo.top_products(
                session, limit=top_n
            )
        ]

        top_customers = [
            TopCustomer(
                customer_id=customer_id,
                name=name,
                order_count=int(order_count or 0),
                total_amount=float(total_amount or 0.0),
            )
            for customer_id, name, order_count, total_amount in self.repo.top_customers(
                session, limit=top_n
            )
        ]

        low_stock = [
            LowStockProduct(
                product_id=p.id,
                name=p.name,
                sku=p.sku,
                stock_on_hand=p.stock_on_hand,
                min_stock=p.min_stock,
            )
            for p in self.repo.low_stock(session, limit=low_stock_n)
        ]

        latest_orders = [
            LatestOrderSummary(
                id=o.id,
                order_number=o.order_number,
                created_at=as_utc(o.created_at),
                customer_id=o.customer_id,
                total=o.total,
                status=o.status,
            )
            for o in self.repo.latest_orders(session, limit=latest_n)
        ]

        return DashboardMetrics(
            orders_by_status=self.repo.count_by_status(session),
            delivery=self._delivery_counters(session, now),
            kpis=kpis,
            top_products=top_products,
            top_customers=top_customers,
            low_stock=low_stock,
            latest_orders=latest_orders,
        )
