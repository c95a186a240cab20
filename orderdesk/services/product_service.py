# orderdesk/services/product_service.py
import re
import uuid

from pydantic import ValidationError as SchemaValidationError
from sqlmodel import Session

from orderdesk.core.errors import NotFound, ValidationError
from orderdesk.models.product import Product
from orderdesk.repositories.product_repo import ProductRepository
from orderdesk.schemas.customer import BulkFailure, BulkResult
from orderdesk.schemas.product import ProductCreate, ProductStockUpdate, ProductUpdate


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - SKU normalization, generation & uniqueness
      - stock adjustments that never go negative
      - soft delete (orders keep referencing the product)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _normalize_sku(raw: str) -> str:
        """
        Uppercase, whitespace collapsed to '-'.
        """
        value = raw.strip().upper()
        value = re.sub(r"\s+", "-", value)
        return value

    @staticmethod
    def _generate_sku() -> str:
        return f"SKU-{uuid.uuid4().hex[:8].upper()}"

    def _ensure_unique_sku(
        self,
        session: Session,
        sku: str,
        current_id: uuid.UUID | None = None,
    ) -> str:
        existing = self.repo.get_by_sku(session, sku)
        if existing is not None and existing.id != current_id:
            raise ValidationError(f"SKU '{sku}' is already in use", sku=sku)
        return sku

    def _build_product(self, session: Session, payload: ProductCreate) -> Product:
        if payload.sku:
            sku = self._ensure_unique_sku(session, self._normalize_sku(payload.sku))
        else:
            sku = self._generate_sku()
        data = payload.model_dump(exclude={"sku"})
        return Product(sku=sku, **data)

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        search: str | None = None,
        active: bool | None = True,
        category: str | None = None,
    ) -> list[Product]:
        return self.repo.list_products(
            session,
            skip=skip,
            limit=limit,
            search=search,
            active=active,
            category=category,
        )

    def list_categories(self, session: Session) -> list[str]:
        return self.repo.list_categories(session)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Product not found", product_id=str(product_id))
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a product. SKU is generated if omitted, else must be unique.
        """
        return self.repo.create(session, self._build_product(session, payload))

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.

        - If sku is changed, enforce uniqueness.
        """
        product = self.get_product(session, product_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("sku") is not None:
            product.sku = self._ensure_unique_sku(
                session, self._normalize_sku(data.pop("sku")), product.id
            )

        for key, value in data.items():
            if value is not None or key in {"brand", "format", "category"}:
                setattr(product, key, value)

        return self.repo.update(session, product)

    def update_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductStockUpdate,
    ) -> Product:
        """
        Set stock_on_hand or apply a delta. Exactly one must be given.
        """
        if (payload.stock_on_hand is None) == (payload.delta is None):
            raise ValidationError("Provide either stock_on_hand or delta")

        product = self.get_product(session, product_id)
        if payload.stock_on_hand is not None:
            new_stock = payload.stock_on_hand
        else:
            new_stock = product.stock_on_hand + payload.delta

        if new_stock < 0:
            raise ValidationError(
                f"Stock cannot go below 0 (have {product.stock_on_hand}, delta {payload.delta})"
            )
        product.stock_on_hand = new_stock
        return self.repo.update(session, product)

    def deactivate_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.get_product(session, product_id)
        product.is_active = False
        return self.repo.update(session, product)

    def bulk_create(self, session: Session, rows: list[dict]) -> BulkResult:
        """
        Validate and create products row by row; failures are reported
        by index and do not stop the import.
        """
        created = 0
        failed: list[BulkFailure] = []
        for index, row in enumerate(rows):
            try:
                payload = ProductCreate.model_validate(row)
                product = self._build_product(session, payload)
            except SchemaValidationError as exc:
                failed.append(
                    BulkFailure(index=index, reason=exc.errors()[0].get("msg", "invalid row"))
                )
                continue
            except ValidationError as exc:
                failed.append(BulkFailure(index=index, reason=exc.message))
                continue

            session.add(product)
            created += 1
        session.commit()
        return BulkResult(created=created, failed=failed)
