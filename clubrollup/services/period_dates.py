"""Calendar-month helpers shared by the aggregation and reporting services."""

from collections.abc import Iterator
from datetime import date, datetime
from zoneinfo import ZoneInfo


def first_day(year: int, month: int) -> date:
    """First calendar day of (year, month)."""
    return date(year, month, 1)


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """Shift a (year, month) pair by a signed number of months."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Half-open date range ``[first day, first day of next month)``."""
    next_year, next_month = add_months(year, month, 1)
    return first_day(year, month), first_day(next_year, next_month)


def iter_months(start: tuple[int, int], end: tuple[int, int]) -> Iterator[tuple[int, int]]:
    """Yield every (year, month) from ``start`` to ``end`` inclusive."""
    year, month = start
    while (year, month) <= end:
        yield year, month
        year, month = add_months(year, month, 1)


def window_bounds(start: tuple[int, int], end: tuple[int, int]) -> tuple[date, date]:
    """Half-open date range covering the inclusive month range ``start..end``."""
    window_start, _ = month_bounds(*start)
    _, window_stop = month_bounds(*end)
    return window_start, window_stop


def as_datetime(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def to_club_time(timestamp: datetime, timezone: ZoneInfo | None) -> datetime:
    """Club wall-clock time of a usage timestamp.

    Naive timestamps are already wall-clock time. Aware ones are converted to
    the club zone; the result is naive either way.
    """
    if timestamp.tzinfo is None:
        return timestamp
    if timezone is not None:
        timestamp = timestamp.astimezone(timezone)
    return timestamp.replace(tzinfo=None)
