"""
Clock -- the only source of "now" for the ledger and the reports.

Responsibility:
    Posting dates, reversal dates, audit timestamps, aging ages and
    relative reporting periods ("this month", "last quarter") are all read
    from a Clock handed in by the host, never from ``datetime.now()``.

Architecture position:
    Kernel > Domain.  SystemClock is the single place that touches the
    real system time.

Invariants enforced:
    - ``now()`` is always timezone-aware; naive datetimes given to
      DeterministicClock are taken as UTC.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

DEFAULT_TEST_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Clock(ABC):
    """
    Injected time source.

    Contract:
        Ledgers, builders and analyzers that need the current time take a
        Clock in their constructor.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        """Calendar date of ``now()`` in the clock's own timezone."""
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Repeated ``now()`` calls return the same instant, which makes every
    report a pure function of its inputs in tests and replays.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._now = _aware(fixed_time) if fixed_time is not None else DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._now

    def set_time(self, time: datetime) -> None:
        self._now = _aware(time)

    def advance(self, *, days: int = 0, seconds: int = 0) -> datetime:
        """Move forward and return the new instant."""
        self._now += timedelta(days=days, seconds=seconds)
        return self._now
