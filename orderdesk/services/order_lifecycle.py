# orderdesk/services/order_lifecycle.py
"""
Order status state machine.

States:
  pendiente (initial) -> compra -> facturado -> delivered
  pendiente | compra  -> nulo   (after the nullification cooldown)

Two kinds of transitions exist:

  - set_status: manual overwrite for roles with manage_orders. Any status
    may follow any other; it is an administrative correction tool.
  - mark_delivered / mark_nullified: guarded business actions.

Functions here mutate the Order in memory only. Locking and committing
belong to OrderService.
"""
from datetime import datetime, timedelta

from orderdesk.core.clock import as_utc, business_date, utcnow
from orderdesk.core.config import get_settings
from orderdesk.core.errors import Forbidden, InvalidTransition, TooEarly
from orderdesk.core.permissions import Capability, has_capability
from orderdesk.models.order import Order

STATUSES: tuple[str, ...] = ("pendiente", "compra", "facturado", "nulo")
INITIAL_STATUS = "pendiente"
NULLIFIABLE_STATUSES = frozenset({"pendiente", "compra"})


def nullify_cooldown() -> timedelta:
    return timedelta(days=get_settings().NULLIFY_AFTER_DAYS)


def set_status(order: Order, new_status: str, role: str | None, now: datetime | None = None) -> Order:
    if not has_capability(role, Capability.MANAGE_ORDERS):
        raise Forbidden(
            f"Role '{role}' cannot change order status",
            capability=Capability.MANAGE_ORDERS.value,
        )
    if new_status not in STATUSES:
        raise InvalidTransition(f"Unknown status '{new_status}'")

    if order.status != new_status:
        order.status = new_status
        order.updated_at = now or utcnow()
    return order


def mark_delivered(order: Order, now: datetime | None = None) -> Order:
    """
    Record delivery of a billed order. Only once.
    """
    if order.status != "facturado":
        raise InvalidTransition(
            f"Only facturado orders can be delivered (status is '{order.status}')",
            status=order.status,
        )
    if order.delivered_at is not None:
        raise InvalidTransition("Order was already delivered", status=order.status)

    now = now or utcnow()
    order.delivered_at = now
    order.updated_at = now
    return order


def can_nullify(order: Order, now: datetime | None = None) -> bool:
    if order.status not in NULLIFIABLE_STATUSES:
        return False
    now = now or utcnow()
    return as_utc(now) - as_utc(order.created_at) >= nullify_cooldown()


def mark_nullified(order: Order, now: datetime | None = None) -> Order:
    """
    Cancel an early-stage order once it is old enough.

    Status eligibility is checked before age, so a facturado order is
    always InvalidTransition regardless of how old it is.
    """
    if order.status not in NULLIFIABLE_STATUSES:
        raise InvalidTransition(
            f"Only pendiente or compra orders can be nullified (status is '{order.status}')",
            status=order.status,
        )

    now = now or utcnow()
    age = as_utc(now) - as_utc(order.created_at)
    cooldown = nullify_cooldown()
    if age < cooldown:
        eligible_at = as_utc(order.created_at) + cooldown
        raise TooEarly(
            f"Order can be nullified after {cooldown.days} days",
            eligible_at=eligible_at.isoformat(),
        )

    order.status = "nulo"
    order.updated_at = now
    return order


def is_overdue(order: Order, now: datetime | None = None) -> bool:
    """
    facturado, not delivered, and the due date is before today's
    business date. Date-only comparison.
    """
    if order.status != "facturado" or order.delivered_at is not None:
        return False
    today = business_date(now or utcnow())
    return order.delivery_due < today


def delivery_status(order: Order, now: datetime | None = None) -> str | None:
    """
    Derived label:
      entregado  delivered
      vencido    overdue
      pendiente  facturado, awaiting delivery
      None       earlier statuses (and nulo)
    """
    if order.delivered_at is not None:
        return "entregado"
    if is_overdue(order, now):
        return "vencido"
    if order.status == "facturado":
        return "pendiente"
    return None
