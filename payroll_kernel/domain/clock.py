"""
Injectable time source for approval stamps.

Calculation code never asks for the time: a pay statement depends only on
its inputs.  The one place wall-clock time enters the system is
``PayrollService`` stamping ``approved_at``, and it does so through a
``Clock`` handed to its constructor so tests can pin the value.

Both clocks return timezone-aware UTC datetimes.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

_DEFAULT_TEST_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current UTC time."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant until moved explicitly.

    Raises ValueError for a naive datetime, since approval stamps are
    persisted as UTC.
    """

    def __init__(self, at: datetime | None = None):
        self._at = _DEFAULT_TEST_TIME
        if at is not None:
            self.set_time(at)

    def now(self) -> datetime:
        return self._at

    def set_time(self, at: datetime) -> None:
        if at.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware datetime")
        self._at = at.astimezone(timezone.utc)

    def advance(self, seconds: int = 0, *, days: int = 0) -> datetime:
        """Move forward and return the new time."""
        self._at += timedelta(days=days, seconds=seconds)
        return self._at
