"""Clock and calendar-day helpers."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from standup.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def today_local(tz_name: str | None = None, now: datetime | None = None) -> date:
    """Calendar day in the deployment timezone."""
    tz = ZoneInfo(tz_name or settings.TIMEZONE)
    return (now or utcnow()).astimezone(tz).date()


def day_start_utc(day: date) -> datetime:
    """A local calendar day is stored as that date's UTC midnight."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
