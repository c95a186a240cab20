# orderdesk/services/order_service.py
import logging
import uuid
from datetime import datetime
from typing import Callable

from sqlmodel import Session

from orderdesk.core.clock import as_utc, business_date, utcnow
from orderdesk.core.config import get_settings
from orderdesk.core.errors import Forbidden, NotFound, ValidationError
from orderdesk.core.locks import KeyedLocks, order_locks
from orderdesk.core.permissions import Capability, has_capability
from orderdesk.models.order import Order, OrderItem
from orderdesk.models.product import Product
from orderdesk.models.user import User
from orderdesk.repositories.customer_repo import CustomerRepository
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.repositories.product_repo import ProductRepository
from orderdesk.schemas.order import (
    DuplicateConflict,
    OrderCreate,
    OrderCreateResult,
    OrderItemCreate,
    OrderItemRead,
    OrderRead,
    OrderUpdate,
    OrderWithItemsRead,
)
from orderdesk.services import order_lifecycle as lifecycle
from orderdesk.services.duplicate_resolver import DuplicateResolver, lock_keys

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate create payloads (items, references, delivery date)
      - Run same-day duplicate consolidation under per-key locks
      - Persist new orders / merged quantities in one transaction
      - Route status changes through the lifecycle rules under a per-order lock
      - Apply visibility rules (vendedores only see their own orders)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        product_repo: ProductRepository,
        clock: Callable[[], datetime] = utcnow,
        locks: KeyedLocks = order_locks,
    ):
        self.order_repo = order_repo
        self.customer_repo = customer_repo
        self.product_repo = product_repo
        self.resolver = DuplicateResolver(order_repo)
        self.clock = clock
        self.locks = locks

    # -------- Creation --------

    def create_order(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderCreateResult | DuplicateConflict:
        """
        Create an order, possibly merging lines into a same-day order.

        Steps:
          1. Validate items and delivery date.
          2. Load customer and products (404 / 400 on bad references).
          3. Lock the customer and (customer, product, day) keys + customer row.
          4. Resolve duplicates: conflict result, merge, or new order.
          5. Commit and return the created and/or merged orders.

        The duplicate check and the write happen under the same locks, so
        two concurrent requests for the same key cannot both see
        "no duplicate".
        """
        now = self.clock()
        today = business_date(now)

        # 1) Payload rules
        self._validate_items(payload.items)
        if payload.delivery_due < today:
            raise ValidationError("Delivery date cannot be in the past")

        # 2) References
        customer = self.customer_repo.get_by_id(session, payload.customer_id)
        if customer is None:
            raise NotFound("Customer not found", customer_id=str(payload.customer_id))
        if not customer.is_active:
            raise ValidationError("Customer is inactive")

        product_ids = [it.product_id for it in payload.items]
        products = self.product_repo.get_many(session, product_ids)
        missing = [str(pid) for pid in product_ids if pid not in products]
        if missing:
            raise NotFound("Product not found", product_ids=missing)
        inactive = [str(p.id) for p in products.values() if not p.is_active]
        if inactive:
            raise ValidationError("Product is inactive", product_ids=inactive)

        # 3-5) Check + write under per-key locks
        with self.locks.hold_many(lock_keys(customer.id, product_ids, today)):
            self.customer_repo.lock_by_id(session, customer.id)

            outcome = self.resolver.resolve(
                session,
                customer.id,
                payload.items,
                products,
                today,
                payload.resolution_mode,
            )
            if isinstance(outcome, DuplicateConflict):
                session.rollback()
                return outcome

            merged = self.resolver.apply_merges(session, outcome, now)
            created: Order | None = None
            if outcome.remaining:
                created = self._insert_order(
                    session, user, payload, outcome.remaining, products, now
                )
            session.commit()

        if merged:
            logger.info(
                "Merged %d line(s) into order(s) %s",
                len(outcome.merges),
                ", ".join(o.order_number for o in merged),
            )
        if created is not None:
            logger.info(
                "Order %s created by %s for customer %s",
                created.order_number,
                user.id,
                customer.id,
            )

        names = {customer.id: customer.name}
        return OrderCreateResult(
            created=self._with_items(session, created, names) if created else None,
            merged=[self._with_items(session, o, names) for o in merged],
        )

    def _validate_items(self, items: list[OrderItemCreate]) -> None:
        max_items = get_settings().MAX_ITEMS_PER_ORDER
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > max_items:
            raise ValidationError(f"Order cannot contain more than {max_items} items")

        seen: set[uuid.UUID] = set()
        for idx, it in enumerate(items):
            if it.quantity <= 0:
                raise ValidationError(
                    "Quantity must be greater than 0", item_index=idx
                )
            if it.product_id in seen:
                raise ValidationError(
                    "Each product may appear only once per order",
                    item_index=idx,
                )
            seen.add(it.product_id)

    def _insert_order(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
        lines: list[OrderItemCreate],
        products: dict[uuid.UUID, Product],
        now: datetime,
    ) -> Order:
        items: list[OrderItem] = []
        total = 0.0
        for position, it in enumerate(lines):
            product = products[it.product_id]
            unit_price = it.unit_price if it.unit_price is not None else product.unit_price
            total += it.quantity * unit_price
            items.append(
                OrderItem(
                    product_id=product.id,
                    position=position,
                    quantity=it.quantity,
                    unit_price=unit_price,
                    unit_of_measure=it.unit_of_measure or product.unit_of_measure,
                    product_name=product.name,
                    brand=it.brand or product.brand,
                    format=it.format or product.format,
                    notes=it.notes,
                )
            )

        order = Order(
            order_number=payload.order_number or self._generate_order_number(now),
            customer_id=payload.customer_id,
            status=lifecycle.INITIAL_STATUS,
            delivery_due=payload.delivery_due,
            notes=payload.notes,
            total=round(total, 2),
            created_by=user.id,
            created_at=now,
            updated_at=now,
        )
        order = self.order_repo.create_order(session, order)

        for item in items:
            item.order_id = order.id
        self.order_repo.create_items(session, items)
        return order

    @staticmethod
    def _generate_order_number(now: datetime) -> str:
        """
        PED-<business date>-<6 hex>, e.g. PED-20261019-3FA2C1.
        """
        return f"PED-{business_date(now):%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"

    # -------- Queries --------

    def list_orders(
        self,
        session: Session,
        user: User,
        status: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders visible to `user` (without items), newest first.
        """
        created_by = None
        if not has_capability(user.role, Capability.VIEW_ALL_ORDERS):
            created_by = user.id

        orders = self.order_repo.list_orders(
            session,
            created_by=created_by,
            status=status,
            search=search.strip() if search else None,
            skip=skip,
            limit=limit,
        )
        names = self.customer_repo.names_for(session, {o.customer_id for o in orders})
        now = self.clock()
        return [self._to_read(o, names, now) for o in orders]

    def get_order(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self._get_visible(session, user, order_id)
        names = self.customer_repo.names_for(session, {order.customer_id})
        return self._with_items(session, order, names)

    # -------- Lifecycle --------

    def set_order_status(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
        new_status: str,
    ) -> OrderRead:
        """
        Manual status overwrite (manage_orders capability, any -> any).
        """
        with self.locks.hold(("order", order_id)):
            order = self._get_for_update(session, order_id)
            lifecycle.set_status(order, new_status, user.role, self.clock())
            self.order_repo.update_order(session, order)
            session.commit()
            session.refresh(order)
        logger.info("Order %s status set to %s by %s", order.order_number, new_status, user.id)
        return self._read_one(session, order)

    def mark_order_delivered(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        with self.locks.hold(("order", order_id)):
            order = self._get_for_update(session, order_id)
            lifecycle.mark_delivered(order, self.clock())
            self.order_repo.update_order(session, order)
            session.commit()
            session.refresh(order)
        logger.info("Order %s delivered", order.order_number)
        return self._read_one(session, order)

    def mark_order_nullified(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        with self.locks.hold(("order", order_id)):
            order = self._get_for_update(session, order_id)
            lifecycle.mark_nullified(order, self.clock())
            self.order_repo.update_order(session, order)
            session.commit()
            session.refresh(order)
        logger.info("Order %s nullified", order.order_number)
        return self._read_one(session, order)

    def update_order(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
        payload: OrderUpdate,
    ) -> OrderWithItemsRead:
        """
        Edit path for an order.

        Permission per field:
          - status      : manage_orders (via lifecycle.set_status)
          - location    : manage_orders
          - customer_id : edit_order_customer (admin)
          - notes       : anyone who can see the order

        Everything is checked before any field is written.
        """
        fields = payload.model_fields_set
        if "location" in fields and not has_capability(user.role, Capability.MANAGE_ORDERS):
            raise Forbidden("Only billing can set the delivery location")
        if "customer_id" in fields and not has_capability(
            user.role, Capability.EDIT_ORDER_CUSTOMER
        ):
            raise Forbidden("Only admins can change the customer of an order")

        with self.locks.hold(("order", order_id)):
            order = self._get_visible(session, user, order_id, for_update=True)
            now = self.clock()

            if "customer_id" in fields and payload.customer_id is not None:
                customer = self.customer_repo.get_by_id(session, payload.customer_id)
                if customer is None:
                    raise NotFound("Customer not found", customer_id=str(payload.customer_id))

            if "status" in fields and payload.status is not None:
                lifecycle.set_status(order, payload.status, user.role, now)
            if "customer_id" in fields and payload.customer_id is not None:
                order.customer_id = payload.customer_id
            if "location" in fields:
                order.location = payload.location or None
            if "notes" in fields:
                order.notes = payload.notes or None

            order.updated_at = now
            self.order_repo.update_order(session, order)
            session.commit()
            session.refresh(order)

        names = self.customer_repo.names_for(session, {order.customer_id})
        return self._with_items(session, order, names)

    # -------- Helpers --------

    def _get_for_update(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id, for_update=True)
        if order is None:
            raise NotFound("Order not found", order_id=str(order_id))
        return order

    def _get_visible(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
        for_update: bool = False,
    ) -> Order:
        """
        404 if the order does not exist or is not visible to `user`.
        """
        order = self.order_repo.get_by_id(session, order_id, for_update=for_update)
        if order is None:
            raise NotFound("Order not found", order_id=str(order_id))
        if (
            not has_capability(user.role, Capability.VIEW_ALL_ORDERS)
            and order.created_by != user.id
        ):
            raise NotFound("Order not found", order_id=str(order_id))
        return order

    def _read_one(self, session: Session, order: Order) -> OrderRead:
        names = self.customer_repo.names_for(session, {order.customer_id})
        return self._to_read(order, names, self.clock())

    def _to_read(
        self,
        order: Order,
        customer_names: dict[uuid.UUID, str],
        now: datetime,
    ) -> OrderRead:
        return OrderRead(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            customer_name=customer_names.get(order.customer_id),
            status=order.status,
            delivery_due=order.delivery_due,
            delivered_at=as_utc(order.delivered_at) if order.delivered_at else None,
            location=order.location,
            notes=order.notes,
            total=order.total,
            created_by=order.created_by,
            created_at=as_utc(order.created_at),
            updated_at=as_utc(order.updated_at),
            delivery_status=lifecycle.delivery_status(order, now),
            can_nullify=lifecycle.can_nullify(order, now),
        )

    def _with_items(
        self,
        session: Session,
        order: Order,
        customer_names: dict[uuid.UUID, str],
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from ORM models.
        """
        items = self.order_repo.list_items_for_order(session, order.id)
        item_dtos = [
            OrderItemRead(
                id=it.id,
                product_id=it.product_id,
                product_name=it.product_name,
                position=it.position,
                quantity=it.quantity,
                unit_of_measure=it.unit_of_measure,
                unit_price=it.unit_price,
                brand=it.brand,
                format=it.format,
                notes=it.notes,
                line_total=round(it.quantity * it.unit_price, 2),
            )
            for it in items
        ]
        base = self._to_read(order, customer_names, self.clock())
        return OrderWithItemsRead(**base.model_dump(), items=item_dtos)
