# bakery/core/auth.py
import uuid
from collections.abc import Iterable
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session, select

from bakery.core.config import get_settings
from bakery.database import get_session
from bakery.models.user import User

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support "guest" mode (browsing products unauthenticated).
bearer_scheme = HTTPBearer(auto_error=False)


class AdminAuthorizer:
    """
    Decides who is an admin from an allowlist of emails.

    The list comes from configuration (ADMIN_EMAILS). Comparison is
    case-insensitive and ignores surrounding whitespace.
    """

    def __init__(self, admin_emails: Iterable[str]):
        self.admin_emails = frozenset(
            e.strip().lower() for e in admin_emails if e and e.strip()
        )

    def is_admin(self, email: str | None) -> bool:
        if not email:
            return False
        return email.strip().lower() in self.admin_emails


def get_admin_authorizer() -> AdminAuthorizer:
    """
    FastAPI dependency; override it in tests to inject a different list.
    """
    return AdminAuthorizer(get_settings().ADMIN_EMAILS)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Signature and `exp` are checked. `aud` is not: Supabase sets it to
    "authenticated" or a project-specific value depending on the client.

    Raises:
        HTTPException(401): bad signature, expired or malformed token.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _identity_from_claims(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    sub = claims.get("sub")
    email = claims.get("email")
    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )
    try:
        return uuid.UUID(sub), email
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )


def _default_name_from_email(email: str) -> str:
    # "thandi.m@example.com" -> "thandi.m"
    return email.split("@", 1)[0][:50]


def _provision_user(
    session: Session,
    user_id: uuid.UUID,
    email: str,
    metadata: dict[str, Any],
) -> User:
    """
    Create the profile row on first sign-in.

    Supabase sign-up stores name / surname / contact_number in
    `user_metadata`; fall back to the email's local part for the name.
    """
    user = User(
        id=user_id,
        email=email,
        name=metadata.get("name") or _default_name_from_email(email),
        surname=metadata.get("surname"),
        contact_number=metadata.get("contact_number"),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    The signed-in customer, or None for guests (no Authorization header).

    Raises:
        HTTPException(401): a token was sent but is invalid or incomplete.
    """
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    user_id, email = _identity_from_claims(claims)

    user = session.exec(select(User).where(User.id == user_id)).first()
    if user is None:
        user = _provision_user(session, user_id, email, claims.get("user_metadata") or {})
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(
    user: User = Depends(require_auth),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
) -> User:
    """
    Enforce admin access: the user's email must be on the allowlist.

    Raises:
        HTTPException(403): if the email is not an admin email.
    """
    if not authorizer.is_admin(user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
