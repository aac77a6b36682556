# bakery/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from bakery.core.auth import AdminAuthorizer, get_admin_authorizer, require_auth
from bakery.database import get_session
from bakery.models.user import User
from bakery.repositories.user_repo import UserRepository
from bakery.schemas.user import UserRead, UserUpdate
from bakery.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.get("/me", response_model=UserRead)
def read_me(
    current_user: User = Depends(require_auth),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
):
    """
    Return the authenticated user's profile.

    The row is created on the first authenticated request, so this also
    serves as the "sign-in completed" call for the frontend.
    """
    return service.get_me(current_user, authorizer)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
):
    """
    Update the authenticated user's profile (partial update).
    """
    return service.update_me(session, current_user, payload, authorizer)
