# orderdesk/routers/customers.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from orderdesk.core.auth import require_auth, require_capability
from orderdesk.core.permissions import Capability
from orderdesk.database import get_session
from orderdesk.repositories.customer_repo import CustomerRepository
from orderdesk.schemas.customer import (
    BulkResult,
    CustomerBulkCreate,
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
)
from orderdesk.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])

repo = CustomerRepository()
service = CustomerService(repo)


@router.get(
    "",
    response_model=list[CustomerRead],
    dependencies=[Depends(require_auth)],
)
def list_customers(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    active: bool | None = None,
):
    """
    List customers, optionally filtered by name/RUT/email and active flag.
    """
    return service.list_customers(session, skip, limit, search, active)


@router.get(
    "/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_auth)],
)
def get_customer(
    customer_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_customer(session, customer_id)


@router.post(
    "",
    response_model=CustomerRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def create_customer(
    payload: CustomerCreate,
    session: Session = Depends(get_session),
):
    return service.create_customer(session, payload)


@router.post(
    "/bulk",
    response_model=BulkResult,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def bulk_create_customers(
    payload: CustomerBulkCreate,
    session: Session = Depends(get_session),
):
    """
    Create many customers from already-parsed rows.

    Invalid rows are reported by index; valid rows are still created.
    """
    return service.bulk_create(session, payload.customers)


@router.put(
    "/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def update_customer(
    customer_id: uuid.UUID,
    payload: CustomerUpdate,
    session: Session = Depends(get_session),
):
    return service.update_customer(session, customer_id, payload)


@router.delete(
    "/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_capability(Capability.DELETE_CATALOG))],
)
def delete_customer(
    customer_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Deactivate a customer (admin only). Existing orders are kept.
    """
    return service.deactivate_customer(session, customer_id)
