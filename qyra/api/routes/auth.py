"""Authentication routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select

from qyra.core.config import settings
from qyra.core.rate_limit import limiter
from qyra.core.rbac import RequireAdmin
from qyra.core.responses import success_response
from qyra.core.security import create_access_token, verify_password
from qyra.db.session import DbSession
from qyra.models.user import User
from qyra.schemas.auth import LoginRequest, LoginResult, UserOut

logger = logging.getLogger("auth")

router = APIRouter()


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_request: LoginRequest, db: DbSession):
    """Authenticate a staff account and return a JWT."""
    client_ip = request.client.host if request.client else "unknown"
    email = login_request.email.lower()
    user = db.scalar(select(User).where(User.email == email))

    if not user or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for email: {email} from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        logger.warning(f"Login attempt for inactive user: {email} (ID: {user.id}) from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    logger.info(f"User {user.id} logged in from IP: {client_ip}")
    result = LoginResult(token=token, user=UserOut.model_validate(user))
    return success_response(result.to_json(), "Login successful")


@router.get("/me")
def me(current_user: RequireAdmin, db: DbSession):
    user = db.get(User, current_user.user_id)
    return success_response(UserOut.model_validate(user).to_json())
