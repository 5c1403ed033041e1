from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

_MONTHS_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_MONTHS_LONG = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC, assuming UTC for naive values."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_datetime(value: date | datetime | str | None) -> datetime | None:
    """Normalize a loosely typed date value to an aware UTC datetime.

    Accepts datetimes, dates and ISO strings (with optional trailing 'Z').
    Returns None for missing or unparseable values so callers can drop the
    record instead of failing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                only_date = date.fromisoformat(s)
            except ValueError:
                return None
            return datetime.combine(only_date, time(0, 0), tzinfo=timezone.utc)
    return None


def start_of_month(dt: datetime) -> datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(dt: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the target month length."""
    index = dt.year * 12 + (dt.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(dt.day, _days_in_month(year, month))
    return dt.replace(year=year, month=month, day=day)


def end_of_month(dt: datetime) -> datetime:
    """Last representable instant of the month containing `dt`."""
    return add_months(start_of_month(dt), 1) - timedelta(microseconds=1)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from `start` to `end`, truncated toward zero."""
    return int((end - start).total_seconds() / 86400)


def format_month_label(dt: datetime) -> str:
    """Return 'Oct 2026'."""
    return f"{_MONTHS_SHORT[dt.month - 1]} {dt.year}"


def format_month_long(dt: datetime) -> str:
    """Return 'October 2026'."""
    return f"{_MONTHS_LONG[dt.month - 1]} {dt.year}"


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        nxt = date(year + 1, 1, 1)
    else:
        nxt = date(year, month + 1, 1)
    return (nxt - date(year, month, 1)).days
