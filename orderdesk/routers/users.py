# orderdesk/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from orderdesk.core.auth import require_auth, require_admin
from orderdesk.core.permissions import Role
from orderdesk.database import get_session
from orderdesk.models.user import User
from orderdesk.repositories.user_repo import UserRepository
from orderdesk.schemas.user import UserRead, UserRoleUpdate, UserStats, UserUpdate
from orderdesk.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    The profile row is auto-created on the first authenticated request
    with role="vendedor".
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `name` is editable.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: Role | None = None,
):
    """
    List all users (admin only).

    Pagination via skip/limit, optional role filter.
    """
    return service.list_users(session, skip, limit, role)


@router.get(
    "/stats",
    response_model=UserStats,
    dependencies=[Depends(require_admin)],
)
def user_stats(session: Session = Depends(get_session)):
    """
    User counts per role (admin only).
    """
    return service.get_stats(session)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return service.get_user(session, user_id)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: admin, facturador, vendedor.
    The last admin cannot be demoted.
    """
    return service.update_role(session, user_id, payload)


@router.delete(
    "/{user_id}",
    status_code=204,
    dependencies=[Depends(require_admin)],
)
def delete_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a user (admin only). Users with orders cannot be deleted.
    """
    service.delete_user(session, user_id)
