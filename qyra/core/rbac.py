"""Role-Based Access Control (RBAC) utilities."""

import logging
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from qyra.core.security import decode_access_token
from qyra.db.session import DbSession

logger = logging.getLogger("auth")


class UserRole(str, Enum):
    """User roles for RBAC."""

    ADMIN = "admin"
    STAFF = "staff"


class TokenData:
    """Authenticated caller.

    Attributes:
        user_id: The user's database ID.
        email: The user's email address.
        role: The user's role.
        name: Display name (defaults to email prefix).
    """

    def __init__(self, user_id: int, email: str, role: UserRole, name: str = ""):
        self.user_id = user_id
        self.id = user_id
        self.email = email
        self.role = role
        self.name = name or email.split("@")[0]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request, db: DbSession) -> TokenData:
    """Resolve the caller from the ``Authorization: Bearer <token>`` header.

    The token must be valid and unexpired, and the user it names must still
    exist and be active.
    """
    from qyra.models.user import User

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise _unauthorized("Not authorized, no token")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise _unauthorized("Not authorized, no token provided")

    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Not authorized, invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Not authorized, invalid token payload")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Token presented for missing or inactive user {user_id}")
        raise _unauthorized("User not found")

    return TokenData(user_id=user.id, email=user.email, role=user.role, name=user.name or "")


def require_role(role: UserRole):
    """Dependency to require an exact role."""

    async def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_user)]
    ) -> TokenData:
        if current_user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {role.value.capitalize()} only.",
            )
        return current_user

    return role_checker


RequireAdmin = Annotated[TokenData, Depends(require_role(UserRole.ADMIN))]
