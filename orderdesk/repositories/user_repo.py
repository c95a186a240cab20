# orderdesk/repositories/user_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from orderdesk.models.order import Order
from orderdesk.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
    ) -> list[User]:
        """
        Paginated user listing, optionally filtered by role.
        """
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count_by_role(self, session: Session) -> dict[str, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        return {role: int(n) for role, n in session.exec(stmt).all()}

    def has_orders(self, session: Session, user_id: uuid.UUID) -> bool:
        stmt = select(Order.id).where(Order.created_by == user_id).limit(1)
        return session.exec(stmt).first() is not None

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def delete(self, session: Session, user: User) -> None:
        """Delete a User."""
        session.delete(user)
        session.commit()
