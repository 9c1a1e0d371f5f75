"""Shop settings routes."""

from fastapi import APIRouter

from qyra.core.rbac import RequireAdmin
from qyra.core.responses import success_response
from qyra.db.session import DbSession
from qyra.schemas.settings import SettingsUpdate
from qyra.services.settings_service import (
    get_shop_settings,
    to_admin,
    to_public,
    update_shop_settings,
)

router = APIRouter()


@router.get("/public")
def get_public_settings(db: DbSession):
    """Availability flags only; no authentication required."""
    return success_response(to_public(get_shop_settings(db)).to_json())


@router.get("")
def get_settings(db: DbSession, current_user: RequireAdmin):
    return success_response(to_admin(get_shop_settings(db)).to_json())


@router.put("/update")
def update_settings(body: SettingsUpdate, db: DbSession, current_user: RequireAdmin):
    row = update_shop_settings(db, body)
    return success_response(to_admin(row).to_json(), "Settings updated successfully")
