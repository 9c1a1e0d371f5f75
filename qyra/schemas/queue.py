"""
Queue Schemas
Pydantic models for the /queue endpoints
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from qyra.models.queue import CustomerType, QueueStatus
from qyra.schemas.common import CamelModel, UtcDatetime


class JoinRequest(CamelModel):
    """Body of POST /queue/join. ``name`` and ``type`` are checked by the service.

    ``type`` is accepted as any JSON value; unrecognised ones mean Walk-in.
    """
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    customer_type: Optional[Any] = Field(default=None, alias="type")


class ServingSummary(CamelModel):
    token_number: str
    name: str


class QueueEntryOut(CamelModel):
    """Full view of a queue entry"""
    id: int
    token_number: str
    name: str
    customer_type: CustomerType = Field(alias="type")
    phone: Optional[str] = None
    email: Optional[str] = None
    priority_level: int
    status: QueueStatus
    created_at: UtcDatetime
    serving_started_at: Optional[UtcDatetime] = None
    completed_at: Optional[UtcDatetime] = None


class JoinResult(CamelModel):
    id: int
    token_number: str
    name: str
    customer_type: CustomerType = Field(alias="type")
    position: Optional[int] = None
    estimated_wait: Optional[str] = None


class EntryStatus(CamelModel):
    """Customer-facing status. Position and wait are only set while waiting."""
    id: int
    token_number: str
    name: str
    customer_type: CustomerType = Field(alias="type")
    status: QueueStatus
    position: Optional[int] = None
    estimated_wait: Optional[str] = None
    currently_serving: Optional[ServingSummary] = None


class CurrentServing(CamelModel):
    id: int
    token_number: str
    name: str
    customer_type: CustomerType = Field(alias="type")
    phone: Optional[str] = None
    email: Optional[str] = None
    started_at: Optional[UtcDatetime] = None


class QueueListing(CamelModel):
    queue: List[QueueEntryOut]
    currently_serving: Optional[QueueEntryOut] = None


class QueueStats(CamelModel):
    """Aggregate counters for the admin dashboard"""
    total_waiting: int
    served_today: int
    currently_serving: Optional[ServingSummary] = None
    average_wait_minutes: int
    by_type: Dict[str, int]
