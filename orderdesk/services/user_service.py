# orderdesk/services/user_service.py
import uuid

from sqlmodel import Session

from orderdesk.core.errors import NotFound, ValidationError
from orderdesk.models.user import User
from orderdesk.repositories.user_repo import UserRepository
from orderdesk.schemas.user import UserRoleUpdate, UserStats, UserUpdate


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile edits (name only)
      - admin role management
      - keep at least one admin and keep users that own orders
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        role: str | None = None,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=skip, limit=limit, role=role)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFound("User not found", user_id=str(user_id))
        return user

    def get_stats(self, session: Session) -> UserStats:
        counts = self.repo.count_by_role(session)
        return UserStats(
            total=sum(counts.values()),
            admins=counts.get("admin", 0),
            facturadores=counts.get("facturador", 0),
            vendedores=counts.get("vendedor", 0),
        )

    def _ensure_not_last_admin(self, session: Session, user: User) -> None:
        if user.role == "admin" and self.repo.count_by_role(session).get("admin", 0) <= 1:
            raise ValidationError("At least one admin must remain")

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        if payload.role != "admin":
            self._ensure_not_last_admin(session, user)
        user.role = payload.role
        return self.repo.update(session, user)

    def delete_user(self, session: Session, user_id: uuid.UUID) -> None:
        """
        Delete a user (admin only).

        Users that created orders are kept: orders reference them.
        """
        user = self.get_user(session, user_id)
        self._ensure_not_last_admin(session, user)
        if self.repo.has_orders(session, user.id):
            raise ValidationError("User has orders and cannot be deleted")
        self.repo.delete(session, user)
