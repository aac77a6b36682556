# bakery/services/user_service.py
from sqlmodel import Session

from bakery.core.auth import AdminAuthorizer
from bakery.models.user import User
from bakery.repositories.user_repo import UserRepository
from bakery.schemas.user import UserRead, UserUpdate


class UserService:
    """
    Business logic for customer profiles.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _to_read(self, user: User, authorizer: AdminAuthorizer) -> UserRead:
        return UserRead(
            id=user.id,
            email=user.email,
            name=user.name,
            surname=user.surname,
            contact_number=user.contact_number,
            is_admin=authorizer.is_admin(user.email),
            created_at=user.created_at,
        )

    def get_me(self, current_user: User, authorizer: AdminAuthorizer) -> UserRead:
        """Return the current authenticated user."""
        return self._to_read(current_user, authorizer)

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
        authorizer: AdminAuthorizer,
    ) -> UserRead:
        """
        Partial update for profile edits (name, surname, contact number).
        """
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(current_user, field, value)

        user = self.repo.update(session, current_user)
        return self._to_read(user, authorizer)
