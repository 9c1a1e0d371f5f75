"""Canonical queue order, positions and wait estimates.

The canonical order of waiting entries is priority level descending, then
join time ascending; the row id breaks exact timestamp ties so the order is
total.  Positions are always derived from current rows and never stored,
because priorities change and entries come and go between reads.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from qyra.core.config import settings
from qyra.db.base import as_utc
from qyra.models.queue import QueueEntry, QueueStatus

NEXT_LABEL = "You are next"


@dataclass(frozen=True)
class WaitEstimate:
    """Minutes until service for a waiting entry."""

    minutes: int

    @property
    def is_next(self) -> bool:
        return self.minutes == 0

    @property
    def label(self) -> str:
        if self.is_next:
            return NEXT_LABEL
        return f"{self.minutes} minutes"

    def __str__(self) -> str:
        return self.label


def canonical_key(entry: QueueEntry):
    return (-entry.priority_level, as_utc(entry.created_at), entry.id or 0)


def order_entries(entries: Iterable[QueueEntry]) -> List[QueueEntry]:
    """Sort entries by the canonical order without filtering."""
    return sorted(entries, key=canonical_key)


def waiting_in_order(entries: Iterable[QueueEntry]) -> List[QueueEntry]:
    """Waiting entries only, in canonical order."""
    return order_entries(e for e in entries if e.status == QueueStatus.WAITING)


def rank(entries: Iterable[QueueEntry], target_id: int) -> Optional[int]:
    """1-based position of ``target_id`` among the waiting entries.

    Returns None when the target is absent or not waiting.
    """
    for position, entry in enumerate(waiting_in_order(entries), start=1):
        if entry.id == target_id:
            return position
    return None


def resolve_avg_minutes(value: Any) -> int:
    """Average minutes per customer, falling back to the configured default.

    Missing, non-numeric, non-finite and non-positive values all fall back.
    """
    default = settings.default_avg_time_per_customer
    if isinstance(value, bool):
        return default
    try:
        minutes = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return minutes if minutes > 0 else default


def estimate_wait(position: int, avg_minutes_per_customer: Any = None) -> WaitEstimate:
    """Wait for the entry at ``position``: everyone ahead times the average."""
    if position < 1:
        raise ValueError(f"position must be >= 1, got {position}")
    remaining = position - 1
    return WaitEstimate(minutes=remaining * resolve_avg_minutes(avg_minutes_per_customer))
