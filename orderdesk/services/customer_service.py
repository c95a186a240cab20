# orderdesk/services/customer_service.py
import uuid

from pydantic import ValidationError as SchemaValidationError
from sqlmodel import Session

from orderdesk.core.errors import NotFound
from orderdesk.models.customer import Customer
from orderdesk.repositories.customer_repo import CustomerRepository
from orderdesk.schemas.customer import (
    BulkFailure,
    BulkResult,
    CustomerCreate,
    CustomerUpdate,
)


class CustomerService:
    """
    Business logic for customers.

    Deleting a customer only deactivates it; orders keep their reference.
    """

    def __init__(self, repo: CustomerRepository):
        self.repo = repo

    def list_customers(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        search: str | None = None,
        active: bool | None = None,
    ) -> list[Customer]:
        return self.repo.list_customers(
            session, skip=skip, limit=limit, search=search, active=active
        )

    def get_customer(self, session: Session, customer_id: uuid.UUID) -> Customer:
        customer = self.repo.get_by_id(session, customer_id)
        if not customer:
            raise NotFound("Customer not found", customer_id=str(customer_id))
        return customer

    def create_customer(self, session: Session, payload: CustomerCreate) -> Customer:
        customer = Customer(**payload.model_dump())
        return self.repo.create(session, customer)

    def update_customer(
        self,
        session: Session,
        customer_id: uuid.UUID,
        payload: CustomerUpdate,
    ) -> Customer:
        customer = self.get_customer(session, customer_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            # name and is_active are NOT NULL; null means "leave as is"
            if value is None and key in {"name", "is_active"}:
                continue
            setattr(customer, key, value)
        return self.repo.update(session, customer)

    def deactivate_customer(self, session: Session, customer_id: uuid.UUID) -> Customer:
        customer = self.get_customer(session, customer_id)
        customer.is_active = False
        return self.repo.update(session, customer)

    def bulk_create(self, session: Session, rows: list[dict]) -> BulkResult:
        """
        Validate each row with CustomerCreate; create the valid ones.

        Rows are already parsed by the client (CSV parsing happens there).
        """
        created = 0
        failed: list[BulkFailure] = []
        for index, row in enumerate(rows):
            try:
                payload = CustomerCreate.model_validate(row)
            except SchemaValidationError as exc:
                failed.append(
                    BulkFailure(index=index, reason=exc.errors()[0].get("msg", "invalid row"))
                )
                continue
            session.add(Customer(**payload.model_dump()))
            created += 1
        session.commit()
        return BulkResult(created=created, failed=failed)
