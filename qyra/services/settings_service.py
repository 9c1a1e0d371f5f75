"""Shop settings access.

The settings row is created on first read.  Callers fetch it per request
instead of holding a process-wide copy, so an update made through one
worker is seen by the next request on any other.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from qyra.core.config import settings as app_settings
from qyra.core.exceptions import UnexpectedError, ValidationError
from qyra.models.settings import (
    MAX_AVG_TIME_PER_CUSTOMER,
    MIN_AVG_TIME_PER_CUSTOMER,
    SHOP_SETTINGS_ID,
    ShopSettings,
)
from qyra.schemas.settings import AdminSettings, PublicSettings, SettingsUpdate, Theme

logger = logging.getLogger(__name__)


def get_shop_settings(db: Session) -> ShopSettings:
    """Return the settings row, creating it with defaults if absent."""
    row = db.get(ShopSettings, SHOP_SETTINGS_ID)
    if row is not None:
        return row

    row = ShopSettings(
        id=SHOP_SETTINGS_ID,
        is_paused=False,
        is_closed=False,
        is_maintenance_mode=False,
        dark_mode=True,
        avg_time_per_customer=app_settings.default_avg_time_per_customer,
    )
    db.add(row)
    try:
        db.commit()
        logger.info("Created default shop settings")
    except IntegrityError:
        # Another request created it first
        db.rollback()
        row = db.get(ShopSettings, SHOP_SETTINGS_ID)
        if row is None:
            raise UnexpectedError("Could not load shop settings")
    db.refresh(row)
    return row


def to_public(row: ShopSettings) -> PublicSettings:
    return PublicSettings(
        is_paused=row.is_paused,
        is_closed=row.is_closed,
        is_maintenance_mode=row.is_maintenance_mode,
    )


def to_admin(row: ShopSettings) -> AdminSettings:
    return AdminSettings(
        is_paused=row.is_paused,
        is_closed=row.is_closed,
        is_maintenance_mode=row.is_maintenance_mode,
        theme=Theme(dark_mode=row.dark_mode),
        avg_time_per_customer=row.avg_time_per_customer,
    )


def unavailable_reason(row: ShopSettings) -> str | None:
    """Why new tokens cannot be issued right now, or None if they can."""
    if row.is_closed:
        return "Shop is closed for today"
    if row.is_maintenance_mode:
        return "Queue is under maintenance. Please try again later"
    if row.is_paused:
        return "Queue is paused. New tokens are not being issued at this time"
    return None


def update_shop_settings(db: Session, changes: SettingsUpdate) -> ShopSettings:
    """Apply a partial update. Nothing is written if any field is invalid."""
    avg = changes.avg_time_per_customer
    if avg is not None and not MIN_AVG_TIME_PER_CUSTOMER <= avg <= MAX_AVG_TIME_PER_CUSTOMER:
        raise ValidationError(
            f"avgTimePerCustomer must be between {MIN_AVG_TIME_PER_CUSTOMER} "
            f"and {MAX_AVG_TIME_PER_CUSTOMER} minutes"
        )

    row = get_shop_settings(db)
    for field in ("is_paused", "is_closed", "is_maintenance_mode", "avg_time_per_customer"):
        value = getattr(changes, field)
        if value is not None:
            setattr(row, field, value)
    if changes.theme is not None and changes.theme.dark_mode is not None:
        row.dark_mode = changes.theme.dark_mode

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update shop settings: {e}")
        raise UnexpectedError("Could not update settings")
    db.refresh(row)
    logger.info(
        f"Shop settings updated: paused={row.is_paused} closed={row.is_closed} "
        f"maintenance={row.is_maintenance_mode} avg={row.avg_time_per_customer}"
    )
    return row
