"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (some drivers drop tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_utc_day(now: Optional[datetime] = None) -> datetime:
    now = as_utc(now) or utc_now()
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def start_of_utc_year(now: Optional[datetime] = None) -> datetime:
    now = as_utc(now) or utc_now()
    return datetime(now.year, 1, 1, tzinfo=timezone.utc)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def parse_iso_date(value) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string, returning None when invalid."""
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def full_months_between(start: datetime, end: datetime) -> int:
    start = as_utc(start)
    end = as_utc(end)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(0, months)
