"""
Shared Router Dependencies.
Authentication, role checks, response language and the reference clock.
"""
import logging
from datetime import date
from typing import Callable, List, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from siamleave.core.config import BusinessSettings, get_business_settings
from siamleave.core.exceptions import AccessDeniedError
from siamleave.core.i18n import resolve_language
from siamleave.database import get_db
from siamleave.models.user import User, UserRole
from siamleave.services import auth as auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="TOKEN_EXPIRED",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing subject in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning(f"Authentication failed: User {user_id} not found in database")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning(f"Authentication failed: User {user_id} is inactive")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive"
        )
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: User = Depends(require_role([UserRole.SUPERADMIN]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise AccessDeniedError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def require_admin():
    """Shorthand for roles that approve leave and read other users' usage."""
    return require_role([UserRole.SUPERADMIN, UserRole.ADMIN])


def require_superadmin():
    """Shorthand for roles that manage reference data and quotas."""
    return require_role([UserRole.SUPERADMIN])


def ensure_self_or_admin(current_user: User, user_id: str) -> None:
    if current_user.id != user_id and not current_user.is_admin:
        raise AccessDeniedError("You can only access your own leave records")


def get_language(
    accept_language: Optional[str] = Header(default=None),
    business: BusinessSettings = Depends(get_business_settings)
) -> str:
    return resolve_language(accept_language, business.default_language)


def get_today() -> date:
    """Reference date for backdating and reset-day checks; overridden in tests."""
    return date.today()
