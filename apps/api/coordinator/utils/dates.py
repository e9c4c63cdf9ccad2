"""Timezone and calendar-day helpers.

All arithmetic on instants is done in UTC (absolute time). Local timezones are
only used to find where a calendar day begins and ends, and to classify an
instant by weekday or hour.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from coordinator.core.config import settings


def utcnow() -> datetime:
    """Current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def get_timezone(name: str | None) -> ZoneInfo:
    """Get a ZoneInfo timezone with safe fallback."""
    if not name:
        return ZoneInfo(settings.DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(settings.DEFAULT_TIMEZONE)


def ensure_aware(value: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Attach tz (default UTC) to a naive datetime; leave aware ones alone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz or timezone.utc)
    return value


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    """Local midnight of day, as a UTC instant."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def end_of_day(day: date, tz: ZoneInfo) -> datetime:
    """Last representable local instant of day, as a UTC instant."""
    return datetime.combine(day, time.max, tzinfo=tz).astimezone(timezone.utc)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """
    Half-open [start, end) bounds of a local calendar day, in UTC.

    end is the next local midnight, so a 23h or 25h DST day has its true
    length.
    """
    return start_of_day(day, tz), start_of_day(day + timedelta(days=1), tz)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date of instant in tz."""
    return ensure_aware(instant).astimezone(tz).date()
