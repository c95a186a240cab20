# orderdesk/services/duplicate_resolver.py
"""
Same-day duplicate consolidation.

A "duplicate" is an incoming line whose product already appears in an
order of the same customer created on the same business calendar day
(not a rolling 24h window). When several orders match, the most recently
created one is both the one reported and the only one that receives a
merge.

The resolver only plans and applies line changes. It never commits; the
caller holds the per-key locks and owns the transaction.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from orderdesk.core.clock import business_day_bounds
from orderdesk.core.errors import TransientError
from orderdesk.models.order import Order, OrderItem
from orderdesk.models.product import Product
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.schemas.order import (
    DuplicateConflict,
    DuplicateLine,
    OrderItemCreate,
)

logger = logging.getLogger(__name__)


@dataclass
class Match:
    order: Order
    item: OrderItem


@dataclass
class ResolutionPlan:
    """
    What to do with an incoming request once no decision is pending.

      merges    : (existing match, incoming line) pairs to accumulate
      remaining : incoming lines that go into a new order
    """

    merges: list[tuple[Match, OrderItemCreate]] = field(default_factory=list)
    remaining: list[OrderItemCreate] = field(default_factory=list)


def lock_keys(
    customer_id: uuid.UUID,
    product_ids: list[uuid.UUID],
    day: date,
) -> list[tuple]:
    """
    Keys that must be held while checking and writing this request.

    The customer key serializes merges from requests with disjoint
    products that land on the same existing order (its total is a
    read-modify-write).
    """
    keys: list[tuple] = [("customer", customer_id)]
    keys.extend(("dup", customer_id, product_id, day) for product_id in product_ids)
    return keys


class DuplicateResolver:
    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    def find_matches(
        self,
        session: Session,
        customer_id: uuid.UUID,
        product_ids: list[uuid.UUID],
        day: date,
    ) -> dict[uuid.UUID, Match]:
        """
        Most recent same-day match per product.

        Raises:
            TransientError: if the lookup itself fails.
        """
        start, end = business_day_bounds(day)
        try:
            rows = self.order_repo.find_same_day_lines(
                session, customer_id, product_ids, start, end
            )
        except OperationalError as exc:
            logger.warning("Duplicate lookup failed for customer %s: %s", customer_id, exc)
            raise TransientError("Could not check for duplicate orders, retry later")

        matches: dict[uuid.UUID, Match] = {}
        # rows are newest first; keep the first hit per product
        for order, item in rows:
            if item.product_id not in matches:
                matches[item.product_id] = Match(order=order, item=item)
        return matches

    def resolve(
        self,
        session: Session,
        customer_id: uuid.UUID,
        items: list[OrderItemCreate],
        products: dict[uuid.UUID, Product],
        day: date,
        mode: str | None,
    ) -> ResolutionPlan | DuplicateConflict:
        """
        Decide how to handle `items`.

          - mode 'ignore'      : everything becomes a new order, no lookup
          - no match           : everything becomes a new order
          - match, mode None   : DuplicateConflict, nothing changes
          - match, mode merge  : matched lines merge, the rest is new
        """
        if mode == "ignore":
            return ResolutionPlan(remaining=list(items))

        matches = self.find_matches(
            session, customer_id, [it.product_id for it in items], day
        )
        if not matches:
            return ResolutionPlan(remaining=list(items))

        if mode is None:
            duplicates: list[DuplicateLine] = []
            for it in items:
                match = matches.get(it.product_id)
                if match is None:
                    continue
                product = products.get(it.product_id)
                duplicates.append(
                    DuplicateLine(
                        order_id=match.order.id,
                        order_number=match.order.order_number,
                        product_id=it.product_id,
                        product_name=match.item.product_name
                        or (product.name if product else None),
                        existing_qty=match.item.quantity,
                        new_qty=it.quantity,
                        unit_of_measure=match.item.unit_of_measure,
                    )
                )
            logger.info(
                "Duplicate conflict for customer %s on %s (%d line(s))",
                customer_id,
                day.isoformat(),
                len(duplicates),
            )
            return DuplicateConflict(duplicates=duplicates)

        plan = ResolutionPlan()
        for it in items:
            match = matches.get(it.product_id)
            if match is None:
                plan.remaining.append(it)
            else:
                plan.merges.append((match, it))
        return plan

    def apply_merges(
        self,
        session: Session,
        plan: ResolutionPlan,
        now: datetime,
    ) -> list[Order]:
        """
        Accumulate quantities onto the matched lines.

        Only quantity changes; brand, format, notes and unit price of the
        existing line are kept. Returns the touched orders, de-duplicated,
        in merge order.
        """
        touched: dict[uuid.UUID, Order] = {}
        for match, incoming in plan.merges:
            match.item.quantity += incoming.quantity
            self.order_repo.update_item(session, match.item)

            order = match.order
            order.total = round(order.total + incoming.quantity * match.item.unit_price, 2)
            order.updated_at = now
            touched[order.id] = order

        for order in touched.values():
            self.order_repo.update_order(session, order)
        return list(touched.values())
