"""
Settings Schemas
Pydantic models for shop settings endpoints
"""
from typing import Optional

from pydantic import StrictBool, StrictInt

from qyra.schemas.common import CamelModel


class PublicSettings(CamelModel):
    """Availability flags visible to customers"""
    is_paused: bool
    is_closed: bool
    is_maintenance_mode: bool


class Theme(CamelModel):
    dark_mode: bool


class AdminSettings(PublicSettings):
    """Everything an admin can see and change"""
    theme: Theme
    avg_time_per_customer: int


class ThemeUpdate(CamelModel):
    dark_mode: Optional[StrictBool] = None


class SettingsUpdate(CamelModel):
    """Partial update; omitted fields are left alone"""
    is_paused: Optional[StrictBool] = None
    is_closed: Optional[StrictBool] = None
    is_maintenance_mode: Optional[StrictBool] = None
    theme: Optional[ThemeUpdate] = None
    avg_time_per_customer: Optional[StrictInt] = None
