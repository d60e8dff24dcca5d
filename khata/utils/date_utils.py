"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone


def to_utc(value: datetime) -> datetime:
    """Normalize to aware UTC; naive values (e.g. read back from SQLite) are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_start(day: date) -> date:
    return day.replace(day=1)


def previous_month_start(day: date) -> date:
    """First day of the month before the one containing day"""
    return (month_start(day) - timedelta(days=1)).replace(day=1)
