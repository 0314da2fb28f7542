"""Time utilities."""

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def add_minutes(start: time, minutes: int) -> time:
    """Clock arithmetic on a time of day, wrapping past midnight."""
    anchor = datetime.combine(date(2000, 1, 1), start)
    return (anchor + timedelta(minutes=minutes)).time()
