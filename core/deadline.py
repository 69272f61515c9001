# core/deadline.py

import time
from typing import Optional

from core.errors import DeadlineExceeded


class Deadline:
    """
    Wall-clock budget for one verification call.

    Passed explicitly into the engine; the engine checks it between
    comparisons and returns a fallback verdict once it has expired.
    """

    def __init__(self, seconds: Optional[float] = None):
        self.seconds = seconds
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    @classmethod
    def never(cls) -> 'Deadline':
        return cls(None)

    def remaining(self) -> Optional[float]:
        """Seconds left, None when unbounded"""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, stage: str = ""):
        """Raise DeadlineExceeded once the budget is spent"""
        if self.expired:
            where = f" during {stage}" if stage else ""
            raise DeadlineExceeded(
                f"verification exceeded {self.seconds:.1f}s budget{where}"
            )
