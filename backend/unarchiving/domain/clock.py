"""Clock capability injected into entities and use cases."""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current UTC time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock frozen at a given instant; advance it explicitly.

    Usage:
        clock = FixedClock(datetime(2025, 1, 10, tzinfo=timezone.utc))
        record = UnarchivingRecord.create(..., clock=clock)
        clock.advance(days=31)
        assert record.is_overdue()
    """

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta: float) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
