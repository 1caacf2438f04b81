from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator

from ..core.constants import WEEKEND_DAYS


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock(value: str) -> time:
    """Parse HH:MM string into time."""
    return datetime.strptime(value, "%H:%M").time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date in [start, end]; empty when end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(day: date, weekend_days: Iterable[int] = WEEKEND_DAYS) -> bool:
    return day.weekday() in set(weekend_days)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start <= b_end and b_start <= a_end


def month_range(period: str) -> tuple[date, date]:
    """'YYYY-MM' -> (first day, last day) of that month."""
    first = datetime.strptime(period, "%Y-%m").date()
    following = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return first, following - timedelta(days=1)
