"""
Chain clock with time travel.

The engine reads ``now`` from a Clock instead of the wall clock so that
voting deadlines can be reached in tests and from the CLI, the same way a
local development chain lets you advance block time.
"""

import time
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)


class Clock:
    """
    Wall-clock time plus a travel offset, in whole unix seconds.

    Args:
        start: Freeze the base time at this timestamp instead of following
               the wall clock (deterministic tests).
        offset: Seconds already travelled forward.
    """

    def __init__(self, start: Optional[int] = None, offset: int = 0):
        self.start = start
        self.offset = offset

    def _base(self) -> int:
        if self.start is not None:
            return self.start
        return int(time.time())

    def now(self) -> int:
        return self._base() + self.offset

    def __call__(self) -> int:
        return self.now()

    def increase(self, seconds: int) -> int:
        """Advance time by *seconds*. Returns the new timestamp."""
        if seconds <= 0:
            raise ValueError("Time can only move forward")
        self.offset += seconds
        logger.info(f"Time advanced by {seconds}s (offset={self.offset}s)")
        return self.now()

    def increase_to(self, timestamp: int) -> int:
        """Advance time to *timestamp*, which must lie in the future."""
        now = self.now()
        if timestamp <= now:
            raise ValueError(f"Timestamp {timestamp} is not after current time {now}")
        return self.increase(timestamp - now)

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Clock":
        return cls(start=data.get("start"), offset=data.get("offset", 0))

    def __repr__(self) -> str:
        return f"<Clock now={self.now()} offset={self.offset}>"
