"""
Date helpers: month keys (YYYY-MM), days in month, night ranges.

Ranges are always [start, end): the check-out day is never a night.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

MONTH_KEY_RE = re.compile(r"(\d{4})-(\d{2})")


def parse_month_key(month_key: str) -> Tuple[int, int]:
    """'2025-12' → (2025, 12). Raises ValueError on bad input."""
    match = MONTH_KEY_RE.fullmatch(month_key.strip()) if isinstance(month_key, str) else None
    if not match:
        raise ValueError(f"Invalid month: {month_key!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month_key!r} (expected YYYY-MM)")
    return year, month


def month_key_of(d: date) -> str:
    return d.strftime("%Y-%m")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_window(month_key: str) -> Tuple[date, date]:
    """First day of the month and first day of the next month."""
    year, month = parse_month_key(month_key)
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def dates_in_range(start: date, end: date) -> List[date]:
    """Every day from start (included) to end (excluded)."""
    days = []
    current = start
    while current < end:
        days.append(current)
        current += timedelta(days=1)
    return days


def parse_iso_date(val: str) -> Optional[date]:
    """Plain YYYY-MM-DD string → date, None if empty or invalid."""
    if not val or not val.strip():
        return None
    try:
        return datetime.strptime(val.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None
