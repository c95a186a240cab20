# orderdesk/repositories/customer_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from orderdesk.models.customer import Customer


class CustomerRepository:
    """
    Data access layer for Customer.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, customer_id: uuid.UUID) -> Customer | None:
        return session.get(Customer, customer_id)

    def lock_by_id(self, session: Session, customer_id: uuid.UUID) -> Customer | None:
        """
        SELECT ... FOR UPDATE on the customer row.

        Serializes order creation per customer across processes on
        PostgreSQL. SQLite ignores FOR UPDATE.
        """
        stmt = select(Customer).where(Customer.id == customer_id).with_for_update()
        return session.exec(stmt).first()

    def list_customers(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        search: str | None = None,
        active: bool | None = None,
    ) -> list[Customer]:
        stmt = select(Customer)
        if active is not None:
            stmt = stmt.where(Customer.is_active == active)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Customer.name).like(pattern),
                    func.lower(Customer.tax_id).like(pattern),
                    func.lower(Customer.email).like(pattern),
                )
            )
        stmt = stmt.order_by(Customer.name).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, customer: Customer) -> Customer:
        session.add(customer)
        session.commit()
        session.refresh(customer)
        return customer

    def update(self, session: Session, customer: Customer) -> Customer:
        session.add(customer)
        session.commit()
        session.refresh(customer)
        return customer

    def names_for(
        self,
        session: Session,
        customer_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, str]:
        if not customer_ids:
            return {}
        stmt = select(Customer.id, Customer.name).where(Customer.id.in_(customer_ids))
        return {cid: name for cid, name in session.exec(stmt).all()}
