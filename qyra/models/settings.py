"""Shop settings singleton."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from qyra.db.base import Base, TimestampMixin

SHOP_SETTINGS_ID = 1
MIN_AVG_TIME_PER_CUSTOMER = 1
MAX_AVG_TIME_PER_CUSTOMER = 120


class ShopSettings(Base, TimestampMixin):
    """Shop-wide flags and the average service time.

    Exactly one row exists, always with ``id == SHOP_SETTINGS_ID``.  The
    three availability flags are stored independently even though the admin
    UI treats them as mutually exclusive.
    """

    __tablename__ = "shop_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    is_paused: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_maintenance_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dark_mode: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    avg_time_per_customer: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
