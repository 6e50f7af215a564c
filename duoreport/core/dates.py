"""DuoReport — Calendar Day Helpers.

All day arithmetic is done on `datetime.date` in UTC, so there is no
daylight-saving transition that could skip or repeat a day.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from duoreport.core.errors import RangeError

DATE_FORMAT = "%Y-%m-%d"


def format_day(d: date) -> str:
    """Format a date as a YYYY-MM-DD CalendarDay string."""
    return d.strftime(DATE_FORMAT)


def parse_day(value: str) -> date:
    """Parse a CalendarDay string. Raises ValueError when malformed."""
    return datetime.strptime(value, DATE_FORMAT).date()


def coerce_day(value: object) -> Optional[str]:
    """Return the CalendarDay for an upstream date value, or None.

    Accepts "2024-01-01" and "2024-01-01 00:00:00" style values.
    """
    if not isinstance(value, str):
        return None
    head = value.strip()[:10]
    try:
        return format_day(parse_day(head))
    except ValueError:
        return None


def utc_today() -> date:
    """Today's date in UTC."""
    return datetime.now(timezone.utc).date()


def enumerate_days(start: str, end: str) -> List[str]:
    """Every CalendarDay from start to end, ascending and inclusive.

    Returns an empty list when start is after end.
    """
    first = parse_day(start)
    last = parse_day(end)
    if first > last:
        return []
    span = (last - first).days
    return [format_day(first + timedelta(days=i)) for i in range(span + 1)]


def lookback_window(lookback_days: int, today: Optional[date] = None) -> Tuple[str, str]:
    """Resolve a lookback into (start, end) with end = today."""
    if isinstance(lookback_days, bool) or not isinstance(lookback_days, int):
        raise RangeError(f"Lookback must be an integer, got {lookback_days!r}")
    if lookback_days < 1:
        raise RangeError(f"Lookback must be at least 1 day, got {lookback_days}")
    end = today or utc_today()
    try:
        start = end - timedelta(days=lookback_days - 1)
    except OverflowError as e:
        raise RangeError(f"Lookback of {lookback_days} days is out of range") from e
    return format_day(start), format_day(end)


def normalize_lookback(
    value: object, allowed: Iterable[int] = (90, 365), default: int = 90
) -> int:
    """Return value as an allowed lookback, or the default when it is not one."""
    allowed_set = set(allowed)
    if isinstance(value, bool) or value is None:
        return default
    try:
        days = int(str(value).strip())
    except ValueError:
        return default
    return days if days in allowed_set else default
