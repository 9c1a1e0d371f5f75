"""Tests for the queue entry status machine."""

from datetime import datetime, timedelta, timezone

import pytest

from qyra.core.exceptions import AlreadyCompletedError, InvalidTransitionError
from qyra.models.queue import CustomerType, QueueEntry, QueueStatus
from qyra.services import queue_lifecycle
from qyra.services.queue_lifecycle import can_transition

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def entry(id, status=QueueStatus.WAITING, customer_type=CustomerType.WALK_IN, priority=None):
    return QueueEntry(
        id=id,
        name=f"Guest {id}",
        customer_type=customer_type,
        priority_level=priority or customer_type.initial_priority,
        token_number=f"QY-{id:04d}",
        status=status,
        created_at=NOW - timedelta(minutes=30),
    )


class TestTransitions:
    @pytest.mark.parametrize("current,target,allowed", [
        (QueueStatus.WAITING, QueueStatus.SERVING, True),
        (QueueStatus.WAITING, QueueStatus.COMPLETED, True),
        (QueueStatus.SERVING, QueueStatus.COMPLETED, True),
        (QueueStatus.SERVING, QueueStatus.WAITING, False),
        (QueueStatus.COMPLETED, QueueStatus.SERVING, False),
        (QueueStatus.COMPLETED, QueueStatus.WAITING, False),
        (QueueStatus.REMOVED, QueueStatus.SERVING, False),
    ])
    def test_table(self, current, target, allowed):
        assert can_transition(current, target) is allowed


# ============== Start serving ==============

class TestStartServing:
    def test_waiting_becomes_serving(self):
        e = entry(1)
        displaced = queue_lifecycle.start_serving(e, [], NOW)
        assert displaced == []
        assert e.status == QueueStatus.SERVING
        assert e.serving_started_at == NOW

    def test_previous_server_completed(self):
        current = entry(1, status=QueueStatus.SERVING)
        nxt = entry(2)
        displaced = queue_lifecycle.start_serving(nxt, [current], NOW)
        assert displaced == [current]
        assert current.status == QueueStatus.COMPLETED
        assert current.completed_at == NOW
        assert nxt.status == QueueStatus.SERVING

    def test_stale_servers_all_completed(self):
        stale = [entry(1, status=QueueStatus.SERVING), entry(2, status=QueueStatus.SERVING)]
        nxt = entry(3)
        queue_lifecycle.start_serving(nxt, stale, NOW)
        everyone = stale + [nxt]
        assert [e.id for e in everyone if e.status == QueueStatus.SERVING] == [3]

    def test_restart_keeps_start_time(self):
        started = NOW - timedelta(minutes=5)
        e = entry(1, status=QueueStatus.SERVING)
        e.serving_started_at = started
        displaced = queue_lifecycle.start_serving(e, [e], NOW)
        assert displaced == []
        assert e.status == QueueStatus.SERVING
        assert e.serving_started_at == started

    def test_completed_entry_rejected(self):
        done = entry(1, status=QueueStatus.COMPLETED)
        current = entry(2, status=QueueStatus.SERVING)
        with pytest.raises(AlreadyCompletedError):
            queue_lifecycle.start_serving(done, [current], NOW)
        # Failure leaves the current server alone
        assert current.status == QueueStatus.SERVING
        assert current.completed_at is None

    def test_removed_entry_rejected(self):
        with pytest.raises(InvalidTransitionError):
            queue_lifecycle.start_serving(entry(1, status=QueueStatus.REMOVED), [], NOW)


# ============== Complete ==============

class TestComplete:
    @pytest.mark.parametrize("status", [QueueStatus.WAITING, QueueStatus.SERVING])
    def test_completes(self, status):
        e = entry(1, status=status)
        queue_lifecycle.complete(e, NOW)
        assert e.status == QueueStatus.COMPLETED
        assert e.completed_at == NOW

    def test_already_completed(self):
        earlier = NOW - timedelta(hours=1)
        e = entry(1, status=QueueStatus.COMPLETED)
        e.completed_at = earlier
        with pytest.raises(AlreadyCompletedError) as exc:
            queue_lifecycle.complete(e, NOW)
        assert exc.value.message == "This token has already been completed"
        assert e.completed_at == earlier


# ============== Priority ==============

class TestIncreasePriority:
    def test_walk_in_bumped_once(self):
        e = entry(1)
        queue_lifecycle.increase_priority(e)
        assert e.priority_level == 2
        assert e.customer_type == CustomerType.WALK_IN

    def test_reaching_three_promotes_to_vip(self):
        e = entry(1, priority=2)
        queue_lifecycle.increase_priority(e)
        assert e.priority_level == 3
        assert e.customer_type == CustomerType.VIP

    def test_senior_promoted_on_first_bump(self):
        e = entry(1, customer_type=CustomerType.SENIOR)
        queue_lifecycle.increase_priority(e)
        assert e.priority_level == 3
        assert e.customer_type == CustomerType.VIP

    def test_saturates_at_five(self):
        e = entry(1, customer_type=CustomerType.VIP, priority=5)
        queue_lifecycle.increase_priority(e)
        assert e.priority_level == 5
        assert e.customer_type == CustomerType.VIP

    def test_repeated_bumps_never_exceed_max(self):
        e = entry(1)
        for _ in range(10):
            queue_lifecycle.increase_priority(e)
        assert e.priority_level == 5

    @pytest.mark.parametrize("status", [QueueStatus.SERVING, QueueStatus.COMPLETED])
    def test_only_waiting(self, status):
        e = entry(1, status=status)
        with pytest.raises(InvalidTransitionError) as exc:
            queue_lifecycle.increase_priority(e)
        assert exc.value.message == "Can only change priority for waiting items"
        assert e.priority_level == 1
