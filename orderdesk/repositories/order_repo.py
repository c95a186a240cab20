# orderdesk/repositories/order_repo.py
import uuid
from datetime import datetime

from sqlalchemy import func, or_
from sqlmodel import Session, select

from orderdesk.models.customer import Customer
from orderdesk.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; creation and merges are multi-step transactions.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_orders(
        self,
        session: Session,
        *,
        created_by: uuid.UUID | None = None,
        status: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order)
        if created_by is not None:
            stmt = stmt.where(Order.created_by == created_by)
        if status:
            stmt = stmt.where(Order.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.join(Customer, Customer.id == Order.customer_id).where(
                or_(
                    func.lower(Order.order_number).like(pattern),
                    func.lower(Customer.name).like(pattern),
                )
            )
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_by_id(
        self,
        session: Session,
        order_id: uuid.UUID,
        for_update: bool = False,
    ) -> Order | None:
        if for_update:
            stmt = select(Order).where(Order.id == order_id).with_for_update()
            return session.exec(stmt).first()
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def find_same_day_lines(
        self,
        session: Session,
        customer_id: uuid.UUID,
        product_ids: list[uuid.UUID],
        start: datetime,
        end: datetime,
    ) -> list[tuple[Order, OrderItem]]:
        """
        (order, line) pairs of this customer's orders created in
        [start, end) that contain any of `product_ids`, newest first.

        nulo and already delivered orders are skipped: quantities are
        never merged into a cancelled order or one whose goods have left.
        """
        if not product_ids:
            return []
        stmt = (
            select(Order, OrderItem)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(
                Order.customer_id == customer_id,
                Order.status != "nulo",
                Order.delivered_at.is_(None),
                Order.created_at >= start,
                Order.created_at < end,
                OrderItem.product_id.in_(product_ids),
            )
            .order_by(Order.created_at.desc(), OrderItem.position)
        )
        return list(session.exec(stmt).all())

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items

    def update_item(self, session: Session, item: OrderItem) -> OrderItem:
        session.add(item)
        session.flush()
        return item
