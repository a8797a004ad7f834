"""
Module: backoffice_kernel.domain.periods
Responsibility:
    Resolve named reporting-period tokens ("month", "last-quarter", "ytd",
    ...) into concrete, inclusive date ranges anchored to an injected "now".

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Used by every report builder that
    takes a period.

Invariants enforced:
    - Periods are inclusive on both ends and start <= end.
    - Calendar boundaries are respected: months run first..last day,
      quarters are 3-calendar-month blocks, weeks start on ``week_start``
      (Sunday by default).
    - Resolution is a pure function of (token, today, bounds).

Failure modes:
    - InvalidPeriodError for unknown tokens, a custom period without both
      bounds, or an inverted custom range.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from backoffice_kernel.exceptions import InvalidPeriodError

SUNDAY = 6  # datetime.weekday() numbering


class PeriodToken(str, Enum):
    """Named reporting periods."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    LAST_WEEK = "last-week"
    MONTH = "month"
    LAST_MONTH = "last-month"
    QUARTER = "quarter"
    LAST_QUARTER = "last-quarter"
    YEAR = "year"
    LAST_YEAR = "last-year"
    YTD = "ytd"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ReportingPeriod:
    """An inclusive date range."""

    start: date
    end: date
    label: str = ""

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidPeriodError(
                self.label or "period",
                f"end {self.end} is before start {self.start}",
            )

    def contains(self, value: date | datetime | None) -> bool:
        if value is None:
            return False
        if isinstance(value, datetime):
            value = value.date()
        return self.start <= value <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def overlap_days(self, start: date, end: date) -> int:
        """Number of days shared with another inclusive range."""
        lo = max(self.start, start)
        hi = min(self.end, end)
        if hi < lo:
            return 0
        return (hi - lo).days + 1

    @property
    def is_calendar_year(self) -> bool:
        return (
            self.start == date(self.start.year, 1, 1)
            and self.end == date(self.start.year, 12, 31)
        )

    def months(self) -> tuple["ReportingPeriod", ...]:
        """Calendar months touched by this period, clipped to it."""
        result: list[ReportingPeriod] = []
        year, month = self.start.year, self.start.month
        while date(year, month, 1) <= self.end:
            whole = month_period(year, month)
            result.append(ReportingPeriod(
                start=max(whole.start, self.start),
                end=min(whole.end, self.end),
                label=whole.label,
            ))
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return tuple(result)


def month_period(year: int, month: int) -> ReportingPeriod:
    last = calendar.monthrange(year, month)[1]
    return ReportingPeriod(
        date(year, month, 1), date(year, month, last), f"{year:04d}-{month:02d}",
    )


def quarter_period(year: int, quarter: int) -> ReportingPeriod:
    if quarter not in (1, 2, 3, 4):
        raise InvalidPeriodError(f"Q{quarter}", "quarter must be 1-4")
    first_month = (quarter - 1) * 3 + 1
    start = month_period(year, first_month).start
    end = month_period(year, first_month + 2).end
    return ReportingPeriod(start, end, f"{year:04d}-Q{quarter}")


def year_period(year: int) -> ReportingPeriod:
    return ReportingPeriod(date(year, 1, 1), date(year, 12, 31), f"{year:04d}")


def _quarter_of(value: date) -> int:
    return (value.month - 1) // 3 + 1


def resolve_period(
    token: PeriodToken | str,
    now: date | datetime,
    custom_start: date | None = None,
    custom_end: date | None = None,
    week_start: int = SUNDAY,
) -> ReportingPeriod:
    """
    Resolve a period token into an inclusive date range.

    Args:
        token: A ``PeriodToken`` or its string value.
        now: The anchor instant (normally ``clock.now()``).
        custom_start: Required for CUSTOM.
        custom_end: Required for CUSTOM.
        week_start: ``date.weekday()`` number of the first day of a week.

    Raises:
        InvalidPeriodError: unknown token or bad custom bounds.
    """
    try:
        token = PeriodToken(token)
    except ValueError:
        raise InvalidPeriodError(str(token), "unknown period token") from None

    today = now.date() if isinstance(now, datetime) else now
    label = token.value

    if token == PeriodToken.TODAY:
        return ReportingPeriod(today, today, label)
    if token == PeriodToken.YESTERDAY:
        day = today - timedelta(days=1)
        return ReportingPeriod(day, day, label)
    if token in (PeriodToken.WEEK, PeriodToken.LAST_WEEK):
        start = today - timedelta(days=(today.weekday() - week_start) % 7)
        if token == PeriodToken.LAST_WEEK:
            start -= timedelta(days=7)
        return ReportingPeriod(start, start + timedelta(days=6), label)
    if token == PeriodToken.MONTH:
        return _relabel(month_period(today.year, today.month), label)
    if token == PeriodToken.LAST_MONTH:
        previous = today.replace(day=1) - timedelta(days=1)
        return _relabel(month_period(previous.year, previous.month), label)
    if token == PeriodToken.QUARTER:
        return _relabel(quarter_period(today.year, _quarter_of(today)), label)
    if token == PeriodToken.LAST_QUARTER:
        quarter = _quarter_of(today) - 1
        year = today.year
        if quarter == 0:
            quarter, year = 4, year - 1
        return _relabel(quarter_period(year, quarter), label)
    if token == PeriodToken.YEAR:
        return _relabel(year_period(today.year), label)
    if token == PeriodToken.LAST_YEAR:
        return _relabel(year_period(today.year - 1), label)
    if token == PeriodToken.YTD:
        return ReportingPeriod(date(today.year, 1, 1), today, label)

    if custom_start is None or custom_end is None:
        raise InvalidPeriodError(label, "custom period requires start and end")
    if isinstance(custom_start, datetime):
        custom_start = custom_start.date()
    if isinstance(custom_end, datetime):
        custom_end = custom_end.date()
    if custom_end < custom_start:
        raise InvalidPeriodError(
            label, f"end {custom_end} is before start {custom_start}",
        )
    return ReportingPeriod(custom_start, custom_end, label)


def _relabel(period: ReportingPeriod, label: str) -> ReportingPeriod:
    return ReportingPeriod(period.start, period.end, label)
