"""Ticket code generation.

Codes look like ``QY-7K2P``: the configured prefix and four characters from
``[A-Z0-9]``.  A code is never reused, so uniqueness is checked against
every row ever stored, not just the waiting ones.
"""

import logging
import random
import string
import time
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qyra.core.config import settings
from qyra.models.queue import QueueEntry

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 4


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class TokenGenerator:
    """Produces unique ticket codes for new queue entries.

    ``generate`` never raises.  After ``max_attempts`` collisions it appends
    the last four digits of the current epoch milliseconds to a fresh code,
    and on a storage error it returns the prefix plus those four digits.
    The unique index on ``token_number`` remains the final guard.
    """

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = _epoch_millis,
        prefix: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.rng = rng or random.SystemRandom()
        self.clock = clock
        self.prefix = prefix if prefix is not None else settings.token_prefix
        self.max_attempts = max_attempts if max_attempts is not None else settings.token_max_attempts

    def random_code(self) -> str:
        return self.prefix + "".join(self.rng.choice(ALPHABET) for _ in range(CODE_LENGTH))

    def token_exists(self, code: str) -> bool:
        stmt = select(QueueEntry.id).where(QueueEntry.token_number == code).limit(1)
        return self.db.execute(stmt).first() is not None

    def _timestamp_suffix(self) -> str:
        return str(self.clock())[-4:]

    def generate(self) -> str:
        try:
            for _ in range(self.max_attempts):
                code = self.random_code()
                if not self.token_exists(code):
                    return code
        except SQLAlchemyError as e:
            logger.warning(f"Token uniqueness check failed, using timestamp code: {e}")
            self.db.rollback()
            return self.prefix + self._timestamp_suffix()

        logger.warning(f"No free token after {self.max_attempts} attempts, appending timestamp")
        return f"{self.random_code()}-{self._timestamp_suffix()}"
