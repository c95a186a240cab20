# orderdesk/repositories/dashboard_repo.py
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from orderdesk.models.customer import Customer
from orderdesk.models.order import Order, OrderItem
from orderdesk.models.product import Product


class DashboardRepository:
    """
    Read-only aggregated queries for the dashboard.

    Sales figures skip `nulo` orders.
    """

    def count_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
        return {status: int(n or 0) for status, n in session.exec(stmt).all()}

    def facturado_orders(self, session: Session) -> list[Order]:
        """
        Orders whose delivery status is meaningful (billed, delivered or not).
        """
        stmt = select(Order).where(Order.status == "facturado")
        return list(session.exec(stmt).all())

    def period_totals(self, session: Session, since: datetime) -> tuple[int, float]:
        """
        (order count, summed total) for orders created at or after `since`.
        """
        stmt = select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total), 0.0),
        ).where(
            Order.status != "nulo",
            Order.created_at >= since,
        )
        count, total = session.exec(stmt).one()
        return int(count or 0), float(total or 0.0)

    def top_products(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[tuple]:
        """
        Top products by quantity ordered.
        """
        qty_sum = func.coalesce(func.sum(OrderItem.quantity), 0)
        amount_sum = func.coalesce(
            func.sum(OrderItem.quantity * OrderItem.unit_price),
            0.0,
        )

        stmt = (
            select(
                OrderItem.product_id,
                Product.name,
                qty_sum.label("total_quantity"),
                amount_sum.label("total_amount"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.status != "nulo")
            .group_by(OrderItem.product_id, Product.name)
            .order_by(qty_sum.desc())
            .limit(limit)
        )

        return list(session.exec(stmt).all())

    def top_customers(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[tuple]:
        """
        Top customers by summed order total.
        """
        amount_sum = func.coalesce(func.sum(Order.total), 0.0)

        stmt = (
            select(
                Order.customer_id,
                Customer.name,
                func.count(Order.id).label("order_count"),
                amount_sum.label("total_amount"),
            )
            .join(Customer, Customer.id == Order.customer_id)
            .where(Order.status != "nulo")
            .group_by(Order.customer_id, Customer.name)
            .order_by(amount_sum.desc())
            .limit(limit)
        )

        return list(session.exec(stmt).all())

    def low_stock(self, session: Session, limit: int = 10) -> list[Product]:
        stmt = (
            select(Product)
            .where(
                Product.is_active.is_(True),
                Product.stock_on_hand <= Product.min_stock,
            )
            .order_by(Product.stock_on_hand, Product.name)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
