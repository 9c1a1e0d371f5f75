"""Provisioning of staff accounts."""

import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from qyra.core.rbac import UserRole
from qyra.core.security import get_password_hash
from qyra.models.user import User

logger = logging.getLogger(__name__)

DEMO_ADMIN_EMAIL = "admin@qyra.com"
DEMO_ADMIN_PASSWORD = "admin123"
DEMO_ADMIN_NAME = "Demo Admin"


def create_admin(
    db: Session,
    email: str = DEMO_ADMIN_EMAIL,
    password: str = DEMO_ADMIN_PASSWORD,
    name: Optional[str] = DEMO_ADMIN_NAME,
) -> Tuple[User, bool]:
    """Create an admin account unless one with this email exists.

    Returns the account and whether it was created.
    """
    email = email.strip().lower()
    existing = db.scalar(select(User).where(User.email == email))
    if existing is not None:
        logger.info(f"Admin {email} already exists")
        return existing, False

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN,
        name=name,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created admin {email} (ID: {user.id})")
    return user, True
