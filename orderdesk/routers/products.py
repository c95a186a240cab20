# orderdesk/routers/products.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from orderdesk.core.auth import require_auth, require_capability
from orderdesk.core.permissions import Capability
from orderdesk.database import get_session
from orderdesk.repositories.product_repo import ProductRepository
from orderdesk.schemas.customer import BulkResult
from orderdesk.schemas.product import (
    ProductBulkCreate,
    ProductCreate,
    ProductRead,
    ProductStockUpdate,
    ProductUpdate,
)
from orderdesk.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Read endpoints --------


@router.get(
    "",
    response_model=list[ProductRead],
    dependencies=[Depends(require_auth)],
)
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
    active: bool | None = True,
    category: str | None = None,
):
    """
    List products.

    - `active=True` hides inactive products by default.
    - `search` matches name, SKU or brand.
    """
    return service.list_products(session, skip, limit, search, active, category)


@router.get(
    "/meta/categories",
    response_model=list[str],
    dependencies=[Depends(require_auth)],
)
def list_categories(session: Session = Depends(get_session)):
    """Distinct product categories."""
    return service.list_categories(session)


@router.get(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_auth)],
)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


# -------- Write endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product.

    - If sku is omitted, one is generated.
    """
    return service.create_product(session, payload)


@router.post(
    "/bulk",
    response_model=BulkResult,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def bulk_create_products(
    payload: ProductBulkCreate,
    session: Session = Depends(get_session),
):
    return service.bulk_create(session, payload.products)


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductRead,
    dependencies=[Depends(require_capability(Capability.MANAGE_CATALOG))],
)
def update_stock(
    product_id: uuid.UUID,
    payload: ProductStockUpdate,
    session: Session = Depends(get_session),
):
    """
    Set stock (`stock_on_hand`) or adjust it (`delta`).
    """
    return service.update_stock(session, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_capability(Capability.DELETE_CATALOG))],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Deactivate a product (admin only). Order lines keep referencing it.
    """
    return service.deactivate_product(session, product_id)
