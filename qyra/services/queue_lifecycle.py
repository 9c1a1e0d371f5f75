"""Status state machine for queue entries.

    waiting --start--> serving --complete--> completed
    waiting --complete------------------->  completed
    waiting --priority--> waiting
    any     --remove----> (row deleted)

Only one entry may be serving at a time.  Starting an entry force-completes
whichever other entry is currently serving.  The functions here mutate the
entries they are given; persisting the result is the caller's job.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional

from qyra.core.exceptions import AlreadyCompletedError, InvalidTransitionError
from qyra.db.base import utcnow
from qyra.models.queue import CustomerType, MAX_PRIORITY, QueueEntry, QueueStatus

logger = logging.getLogger(__name__)

VIP_THRESHOLD = 3

ALLOWED_TRANSITIONS: Dict[QueueStatus, FrozenSet[QueueStatus]] = {
    QueueStatus.WAITING: frozenset({QueueStatus.WAITING, QueueStatus.SERVING, QueueStatus.COMPLETED}),
    QueueStatus.SERVING: frozenset({QueueStatus.SERVING, QueueStatus.COMPLETED}),
    QueueStatus.COMPLETED: frozenset(),
    QueueStatus.REMOVED: frozenset(),
}


def can_transition(current: QueueStatus, target: QueueStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _check(entry: QueueEntry, target: QueueStatus) -> None:
    if can_transition(entry.status, target):
        return
    if entry.status == QueueStatus.COMPLETED:
        raise AlreadyCompletedError()
    raise InvalidTransitionError(
        f"Cannot move token {entry.token_number} from {entry.status.value} to {target.value}"
    )


def _mark_completed(entry: QueueEntry, now: datetime) -> None:
    entry.status = QueueStatus.COMPLETED
    if entry.completed_at is None:
        entry.completed_at = now


def start_serving(
    entry: QueueEntry,
    currently_serving: Iterable[QueueEntry] = (),
    now: Optional[datetime] = None,
) -> List[QueueEntry]:
    """Move ``entry`` to serving.

    Every other entry in ``currently_serving`` is completed first; normally
    there is at most one, but leftovers from concurrent starts are cleaned
    up too.  Returns the entries that were force-completed.  Restarting the
    entry that is already serving keeps its original start time.
    """
    now = now or utcnow()
    _check(entry, QueueStatus.SERVING)

    displaced = []
    for other in currently_serving:
        if other.id == entry.id or other.status != QueueStatus.SERVING:
            continue
        _mark_completed(other, now)
        displaced.append(other)
        logger.info(f"Force-completed {other.token_number} to serve {entry.token_number}")

    if entry.status != QueueStatus.SERVING:
        entry.status = QueueStatus.SERVING
        entry.serving_started_at = now
    return displaced


def complete(entry: QueueEntry, now: Optional[datetime] = None) -> QueueEntry:
    """Move a waiting or serving entry to completed and stamp ``completed_at``."""
    _check(entry, QueueStatus.COMPLETED)
    _mark_completed(entry, now or utcnow())
    return entry


def increase_priority(entry: QueueEntry) -> QueueEntry:
    """Bump a waiting entry's priority by one, saturating at MAX_PRIORITY.

    Reaching VIP_THRESHOLD promotes the customer type to VIP.  Nothing here
    ever demotes a type.
    """
    if entry.status != QueueStatus.WAITING:
        raise InvalidTransitionError("Can only change priority for waiting items")

    if entry.priority_level < MAX_PRIORITY:
        entry.priority_level += 1
        if entry.priority_level >= VIP_THRESHOLD and entry.customer_type != CustomerType.VIP:
            entry.customer_type = CustomerType.VIP
    return entry
