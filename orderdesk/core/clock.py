# orderdesk/core/clock.py
"""
Time helpers.

All timestamps are stored in UTC. Calendar questions ("same day",
"overdue") are answered in the configured BUSINESS_TIMEZONE.
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from orderdesk.core.config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read back from the database.

    SQLite drops tzinfo on round-trip; naive values are UTC by convention.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def business_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().BUSINESS_TIMEZONE)


def business_date(value: datetime) -> date:
    """Calendar date of `value` in the business timezone."""
    return as_utc(value).astimezone(business_tz()).date()


def business_day_bounds(day: date) -> tuple[datetime, datetime]:
    """
    UTC [start, end) range covering one business calendar day.

    DST days are 23 or 25 hours long, so the end is computed from the
    next calendar date rather than start + 24h.
    """
    tz = business_tz()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
