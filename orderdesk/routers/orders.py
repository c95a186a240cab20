# orderdesk/routers/orders.py
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlmodel import Session

from orderdesk.core.auth import require_auth, require_capability
from orderdesk.core.notifications import notify_order_created
from orderdesk.core.permissions import Capability
from orderdesk.database import get_session
from orderdesk.models.user import User
from orderdesk.repositories.customer_repo import CustomerRepository
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.repositories.product_repo import ProductRepository
from orderdesk.schemas.order import (
    DuplicateConflict,
    OrderCreate,
    OrderCreateResult,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderUpdate,
    OrderWithItemsRead,
)
from orderdesk.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
customer_repo = CustomerRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, customer_repo, product_repo)


@router.post(
    "",
    response_model=OrderCreateResult,
    responses={status.HTTP_409_CONFLICT: {"model": DuplicateConflict}},
)
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_capability(Capability.CREATE_ORDERS)),
):
    """
    Create an order.

    If a same-day order of this customer already holds one of the
    products and `resolution_mode` is not set, responds 409 with the
    conflicting lines. Repeat the request with resolution_mode
    'merge' or 'ignore' to proceed.

    Auth:
      - vendedor, admin
    """
    result = service.create_order(session, current_user, payload)
    if isinstance(result, DuplicateConflict):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=jsonable_encoder(result),
        )

    if result.created is not None:
        background_tasks.add_task(notify_order_created, result.created)
    return result


@router.get("", response_model=list[OrderRead])
def list_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    status: OrderStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List orders, newest first.

    vendedores only see orders they created.
    """
    return service.list_orders(session, current_user, status, search, skip, limit)


@router.get("/{order_id}", response_model=OrderWithItemsRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order with items.
    """
    return service.get_order(session, current_user, order_id)


@router.patch("/{order_id}", response_model=OrderWithItemsRead)
def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Edit status / location / notes (and customer, admin only).
    """
    return service.update_order(session, current_user, order_id, payload)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Overwrite order status.

    Any status may follow any other; this is the manual correction tool.
    Roles without manage_orders get 403.
    """
    return service.set_order_status(session, current_user, order_id, payload.status)


@router.patch(
    "/{order_id}/deliver",
    response_model=OrderRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_ORDERS))],
)
def mark_delivered(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Mark a facturado order as delivered (once).
    """
    return service.mark_order_delivered(session, order_id)


@router.patch(
    "/{order_id}/nullify",
    response_model=OrderRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_ORDERS))],
)
def mark_nullified(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Nullify a pendiente/compra order at least NULLIFY_AFTER_DAYS old.
    """
    return service.mark_order_nullified(session, order_id)
