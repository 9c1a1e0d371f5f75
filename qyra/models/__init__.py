"""SQLAlchemy models."""

from qyra.models.user import User
from qyra.models.queue import QueueEntry, QueueStatus, CustomerType
from qyra.models.settings import ShopSettings

__all__ = [
    "User",
    "QueueEntry",
    "QueueStatus",
    "CustomerType",
    "ShopSettings",
]
