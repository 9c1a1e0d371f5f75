"""Queue entry model and its enumerations."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qyra.db.base import Base, TimestampMixin


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class CustomerType(str, Enum):
    """Kind of customer; decides the initial priority level."""

    WALK_IN = "Walk-in"
    VIP = "VIP"
    SENIOR = "Senior"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional["CustomerType"] = None) -> Optional["CustomerType"]:
        """Match ``value`` against the known types ignoring case and separators.

        ``WalkIn``, ``walk_in`` and ``Walk-in`` all resolve to WALK_IN.
        Anything unrecognised yields ``default``.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return default
        key = _normalise(value)
        for member in cls:
            if key in (_normalise(member.value), _normalise(member.name)):
                return member
        return default

    @property
    def initial_priority(self) -> int:
        return INITIAL_PRIORITY[self]


INITIAL_PRIORITY = {
    CustomerType.WALK_IN: 1,
    CustomerType.SENIOR: 2,
    CustomerType.VIP: 3,
}

MIN_PRIORITY = 1
MAX_PRIORITY = 5


class QueueStatus(str, Enum):
    WAITING = "waiting"
    SERVING = "serving"
    COMPLETED = "completed"
    REMOVED = "removed"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["QueueStatus"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def _normalise(value: str) -> str:
    return value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")


class QueueEntry(Base, TimestampMixin):
    """One customer's ticket.

    ``created_at`` doubles as the tie-break key of the canonical queue
    order and must never be modified after insert.
    """

    __tablename__ = "queue_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_type: Mapped[CustomerType] = mapped_column(
        SAEnum(CustomerType, values_callable=_enum_values, native_enum=False, length=20),
        default=CustomerType.WALK_IN,
        nullable=False,
    )
    priority_level: Mapped[int] = mapped_column(Integer, default=MIN_PRIORITY, nullable=False)
    token_number: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[QueueStatus] = mapped_column(
        SAEnum(QueueStatus, values_callable=_enum_values, native_enum=False, length=20),
        default=QueueStatus.WAITING,
        nullable=False,
    )
    serving_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True,
    )

    __table_args__ = (
        Index("ix_queue_entries_token_number", "token_number", unique=True),
        Index("ix_queue_entries_status_priority_created", "status", "priority_level", "created_at"),
    )

    def __repr__(self) -> str:
        status = getattr(self.status, "value", self.status)
        return f"<QueueEntry {self.token_number} {status} p{self.priority_level}>"
