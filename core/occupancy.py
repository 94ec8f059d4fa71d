"""
Occupancy per unit and month.

A booking occupies the nights [check_in, check_out): the check-out day is
free for the next guest. Stays crossing the month edges are clamped to
the month; overlapping stays on the same unit count each night once.
"""

from datetime import date
from typing import Iterable, Set

from core.dates import dates_in_range, days_in_month, month_window, parse_month_key
from core.models import BookingRecord


def occupied_days(unit_name: str, month_key: str, bookings: Iterable[BookingRecord]) -> Set[date]:
    """Distinct nights of the month in which the unit is occupied."""
    month_start, month_end = month_window(month_key)
    days: Set[date] = set()
    for b in bookings:
        if b.unit != unit_name or b.check_in is None or b.check_out is None:
            continue
        start = max(b.check_in, month_start)
        end = min(b.check_out, month_end)
        if start < end:
            days.update(dates_in_range(start, end))
    return days


def calculate_occupancy(unit_name: str, month_key: str, bookings: Iterable[BookingRecord]) -> float:
    """Percentage (0-100) of the month's nights occupied for the unit."""
    year, month = parse_month_key(month_key)
    total_days = days_in_month(year, month)
    if total_days <= 0:
        return 0.0
    return 100.0 * len(occupied_days(unit_name, month_key, bookings)) / total_days


def is_occupied(unit_name: str, day: date, bookings: Iterable[BookingRecord]) -> bool:
    """True if a booking of the unit covers the night of `day`."""
    return any(
        b.unit == unit_name and b.check_in is not None and b.check_out is not None
        and b.check_in <= day < b.check_out
        for b in bookings
    )
