"""Calendar helpers.

Persisted dates are timezone-naive 'YYYY-MM-DD' strings. Everything here works
on their (year, month, day) components; ``datetime.date`` only appears as a
naive calendar value, never mixed with clock time.
"""
from datetime import date, timedelta
import calendar
from meusaldo.utils.constants import DATE_FORMAT


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def split_date(date_str: str) -> tuple[int, int, int] | None:
    """Split 'YYYY-MM-DD' into integer components, or None if malformed."""
    if not date_str:
        return None
    parts = str(date_str).strip().split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    if not 1 <= day <= calendar.monthrange(year, month)[1]:
        return None
    return year, month, day


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    parts = split_date(date_str)
    if parts is None:
        return None
    return date(*parts)


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_ymd(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def month_index(year: int, month: int) -> int:
    """Absolute month number (year * 12 + zero-based month)."""
    return year * 12 + (month - 1)


def from_month_index(index: int) -> tuple[int, int]:
    return index // 12, index % 12 + 1


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months_ymd(year: int, month: int, day: int, n: int) -> tuple[int, int, int]:
    """Add n months to a calendar date, clamping day to month end."""
    new_year, new_month = from_month_index(month_index(year, month) + n)
    return new_year, new_month, clamp_day_to_month(new_year, new_month, day)


def last_day_of_month_str(year: int, month: int) -> str:
    return format_ymd(year, month, calendar.monthrange(year, month)[1])


def add_days_str(date_str: str, days: int) -> str:
    d = parse_date(date_str)
    if d is None:
        raise ValueError(f"Invalid date: {date_str}")
    return format_date(d + timedelta(days=days))


def friendly_month(year: int, month: int) -> str:
    """e.g. (2026, 2) -> 'February 2026'."""
    return date(year, month, 1).strftime("%B %Y")


def format_display_date(date_str: str) -> str:
    """Convert a YYYY-MM-DD storage string to DD/MM/YYYY for display."""
    parts = split_date(date_str)
    if parts is None:
        return date_str or ""
    year, month, day = parts
    return f"{day:02d}/{month:02d}/{year:04d}"
