"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from qyra.core.rbac import UserRole
from qyra.schemas.common import CamelModel


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserOut(CamelModel):
    """Public view of a staff account."""

    id: int
    name: Optional[str] = None
    email: str
    role: UserRole


class LoginResult(CamelModel):
    """JWT plus the account it was issued for."""

    token: str
    token_type: str = "bearer"
    user: UserOut
