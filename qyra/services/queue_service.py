"""
Queue Service
=============
Join, status, listing, admin transitions and daily statistics for the
virtual queue.

Every call reads current rows from the database; positions and waits are
computed at read time and never cached.  There is no locking: the store is
the only serialisation point, so two admins starting different entries at
the same moment can briefly leave two entries serving.  The next start
cleans that up.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from math import floor
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from qyra.core.config import settings
from qyra.core.exceptions import (
    DuplicateTokenError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from qyra.db.base import as_utc, utcnow
from qyra.models.queue import CustomerType, QueueEntry, QueueStatus
from qyra.schemas.queue import (
    CurrentServing,
    EntryStatus,
    JoinResult,
    QueueEntryOut,
    QueueListing,
    QueueStats,
    ServingSummary,
)
from qyra.services import queue_lifecycle, queue_ordering
from qyra.services.settings_service import get_shop_settings, unavailable_reason
from qyra.services.token_generator import TokenGenerator

logger = logging.getLogger(__name__)


def _calendar_tz() -> tzinfo:
    if settings.timezone.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.timezone)


def _day_bounds(now: datetime):
    """UTC start and end of the calendar day containing ``now``."""
    local = as_utc(now).astimezone(_calendar_tz())
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end = (start + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def _summary(entry: Optional[QueueEntry]) -> Optional[ServingSummary]:
    if entry is None:
        return None
    return ServingSummary(token_number=entry.token_number, name=entry.name)


class QueueService:
    """Queue operations against a single database session."""

    def __init__(self, db: Session, token_generator: Optional[TokenGenerator] = None):
        self.db = db
        self.tokens = token_generator or TokenGenerator(db)

    # ===== READS =====

    def _get(self, entry_id: int) -> QueueEntry:
        entry = self.db.get(QueueEntry, entry_id, populate_existing=True)
        if entry is None:
            raise NotFoundError()
        return entry

    def _waiting_entries(self) -> List[QueueEntry]:
        stmt = (
            select(QueueEntry)
            .where(QueueEntry.status == QueueStatus.WAITING)
            .order_by(QueueEntry.priority_level.desc(), QueueEntry.created_at, QueueEntry.id)
        )
        return list(self.db.scalars(stmt))

    def _serving_entries(self) -> List[QueueEntry]:
        stmt = (
            select(QueueEntry)
            .where(QueueEntry.status == QueueStatus.SERVING)
            .order_by(QueueEntry.serving_started_at.desc(), QueueEntry.id.desc())
        )
        return list(self.db.scalars(stmt))

    def _avg_minutes(self) -> int:
        shop = get_shop_settings(self.db)
        return queue_ordering.resolve_avg_minutes(shop.avg_time_per_customer)

    def _position_and_wait(self, entry: QueueEntry):
        position = queue_ordering.rank(self._waiting_entries(), entry.id)
        if position is None:
            return None, None
        return position, queue_ordering.estimate_wait(position, self._avg_minutes())

    def get_current_serving(self) -> Optional[QueueEntry]:
        """The serving entry, or None. The most recently started wins if there are several."""
        serving = self._serving_entries()
        return serving[0] if serving else None

    # ===== CUSTOMER OPERATIONS =====

    def join(
        self,
        name: Optional[str],
        phone: Optional[str] = None,
        email: Optional[str] = None,
        customer_type: Any = None,
    ) -> JoinResult:
        """Create a waiting entry and report where it landed in the queue."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please provide a name")

        if settings.block_join_when_unavailable:
            reason = unavailable_reason(get_shop_settings(self.db))
            if reason:
                raise ValidationError(reason)

        ctype = CustomerType.parse(customer_type, default=CustomerType.WALK_IN)
        entry = QueueEntry(
            name=name,
            phone=(phone or "").strip() or None,
            email=(email or "").strip().lower() or None,
            customer_type=ctype,
            priority_level=ctype.initial_priority,
            token_number=self.tokens.generate(),
            status=QueueStatus.WAITING,
        )

        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Token {entry.token_number} rejected by the store: {e}")
            raise DuplicateTokenError()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to add queue entry: {e}")
            raise UnexpectedError("Could not join the queue")
        self.db.refresh(entry)

        position, wait = self._position_and_wait(entry)
        logger.info(
            f"{entry.token_number} joined as {ctype.value} (priority {entry.priority_level}), "
            f"position {position}"
        )
        return JoinResult(
            id=entry.id,
            token_number=entry.token_number,
            name=entry.name,
            customer_type=entry.customer_type,
            position=position,
            estimated_wait=wait.label if wait else None,
        )

    def get_status(self, entry_id: int) -> EntryStatus:
        entry = self._get(entry_id)
        position, wait = (None, None)
        if entry.status == QueueStatus.WAITING:
            position, wait = self._position_and_wait(entry)
        return EntryStatus(
            id=entry.id,
            token_number=entry.token_number,
            name=entry.name,
            customer_type=entry.customer_type,
            status=entry.status,
            position=position,
            estimated_wait=wait.label if wait else None,
            currently_serving=_summary(self.get_current_serving()),
        )

    def current_serving_view(self) -> Optional[CurrentServing]:
        entry = self.get_current_serving()
        if entry is None:
            return None
        return CurrentServing(
            id=entry.id,
            token_number=entry.token_number,
            name=entry.name,
            customer_type=entry.customer_type,
            phone=entry.phone,
            email=entry.email,
            started_at=entry.serving_started_at,
        )

    def list_queue(
        self,
        status: Optional[str] = None,
        customer_type: Optional[str] = None,
    ) -> QueueListing:
        """Entries in canonical order, excluding removed ones unless asked for."""
        stmt = select(QueueEntry)
        if status:
            parsed_status = QueueStatus.parse(status)
            if parsed_status is None:
                raise ValidationError(f"Unknown status '{status}'")
            stmt = stmt.where(QueueEntry.status == parsed_status)
        else:
            stmt = stmt.where(QueueEntry.status != QueueStatus.REMOVED)
        if customer_type:
            parsed_type = CustomerType.parse(customer_type)
            if parsed_type is None:
                raise ValidationError(f"Unknown customer type '{customer_type}'")
            stmt = stmt.where(QueueEntry.customer_type == parsed_type)

        entries = queue_ordering.order_entries(self.db.scalars(stmt))
        current = self.get_current_serving()
        return QueueListing(
            queue=[QueueEntryOut.model_validate(e) for e in entries],
            currently_serving=QueueEntryOut.model_validate(current) if current else None,
        )

    # ===== ADMIN OPERATIONS =====

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise UnexpectedError(f"Could not {action}")

    def start_serving(self, entry_id: int) -> QueueEntry:
        """Serve ``entry_id``, completing whoever was being served.

        Demoting the previous entry and promoting this one are committed
        together.
        """
        entry = self._get(entry_id)
        displaced = queue_lifecycle.start_serving(entry, self._serving_entries(), utcnow())
        self._commit("start serving")
        self.db.refresh(entry)
        logger.info(
            f"Serving {entry.token_number}"
            + (f", completed {', '.join(d.token_number for d in displaced)}" if displaced else "")
        )
        return entry

    def complete_serving(self, entry_id: int) -> QueueEntry:
        entry = self._get(entry_id)
        queue_lifecycle.complete(entry, utcnow())
        self._commit("complete service")
        self.db.refresh(entry)
        logger.info(f"Completed {entry.token_number}")
        return entry

    def increase_priority(self, entry_id: int) -> QueueEntry:
        entry = self._get(entry_id)
        queue_lifecycle.increase_priority(entry)
        self._commit("increase priority")
        self.db.refresh(entry)
        logger.info(
            f"Priority of {entry.token_number} now {entry.priority_level} ({entry.customer_type.value})"
        )
        return entry

    def remove(self, entry_id: int) -> QueueEntryOut:
        """Delete the entry outright, whatever its status. Returns its last state."""
        entry = self._get(entry_id)
        snapshot = QueueEntryOut.model_validate(entry)
        self.db.delete(entry)
        self._commit("remove queue entry")
        logger.info(f"Removed {snapshot.token_number} ({snapshot.status.value})")
        return snapshot

    # ===== STATISTICS =====

    def get_stats(self, now: Optional[datetime] = None) -> QueueStats:
        """Dashboard counters for the current calendar day.

        Served-today and average wait are keyed on ``completed_at`` alone, so
        an entry completed today counts whatever its status is now.
        """
        day_start, day_end = _day_bounds(now or utcnow())

        total_waiting = self.db.scalar(
            select(func.count(QueueEntry.id)).where(QueueEntry.status == QueueStatus.WAITING)
        ) or 0

        completed_today = [
            e for e in self.db.scalars(
                select(QueueEntry).where(
                    QueueEntry.completed_at.is_not(None),
                    QueueEntry.completed_at >= day_start,
                    QueueEntry.completed_at < day_end,
                )
            )
            if day_start <= as_utc(e.completed_at) < day_end
        ]

        waits = [
            (as_utc(e.completed_at) - as_utc(e.created_at)).total_seconds() / 60
            for e in completed_today
        ]
        waits = [w for w in waits if w > 0]
        average_wait = _round_half_up(sum(waits) / len(waits)) if waits else 0

        by_type = {t.value: 0 for t in CustomerType}
        rows = self.db.execute(
            select(QueueEntry.customer_type, func.count(QueueEntry.id))
            .where(QueueEntry.status == QueueStatus.WAITING)
            .group_by(QueueEntry.customer_type)
        )
        for ctype, count in rows:
            by_type[CustomerType(ctype).value] = count

        return QueueStats(
            total_waiting=total_waiting,
            served_today=len(completed_today),
            currently_serving=_summary(self.get_current_serving()),
            average_wait_minutes=average_wait,
            by_type=by_type,
        )
