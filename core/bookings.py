"""
Operations on the booking collection: manual entry, add-on changes,
units inferred from bookings, list filter.

Every function returns a new list; the input bookings are never modified.
"""

import random
from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import (
    AddOn, AddOnCategory, AddOnState, BookingRecord, Platform, UnitDefinition, UnitType,
    CENT, to_money,
)
from config import BLOCKED_ADDON_KEYWORDS, DEFAULT_UNIT_MAX_GUESTS, DEFAULT_UNIT_NIGHTLY_RATE


def build_manual_bookings(
    guest_name: str,
    units: List[str],
    check_in: date,
    check_out: date,
    amount,
    paid,
    platform: Platform = Platform.DIRECT,
    guests: int = 2,
    booking_reference: Optional[str] = None,
) -> List[BookingRecord]:
    """
    One booking per selected unit, sharing the reference.
    amount and paid are totals for the whole stay, split evenly across units.
    """
    if not units:
        raise ValueError("Select at least one unit")
    if check_in is None or check_out is None or check_out <= check_in:
        raise ValueError(f"Check-out ({check_out}) must be after check-in ({check_in})")

    count = len(units)
    amount_per_unit = (to_money(amount) / count).quantize(CENT, rounding=ROUND_HALF_UP)
    paid_per_unit = (to_money(paid) / count).quantize(CENT, rounding=ROUND_HALF_UP)
    reference = booking_reference or f"REF-{random.randint(0, 9999)}"

    return [
        BookingRecord(
            booking_reference=reference,
            guest_name=guest_name,
            unit=unit_name,
            platform=platform,
            guests=max(int(guests), 1),
            check_in=check_in,
            check_out=check_out,
            amount=amount_per_unit,
            paid=paid_per_unit,
            add_ons=[],
        )
        for unit_name in units
    ]


def _replace_booking(bookings: List[BookingRecord], booking_id: str, change) -> List[BookingRecord]:
    if not any(b.internal_id == booking_id for b in bookings):
        raise KeyError(f"Booking not found: {booking_id}")
    return [change(b) if b.internal_id == booking_id else b for b in bookings]


def add_addon(
    bookings: List[BookingRecord],
    booking_id: str,
    category: AddOnCategory,
    name: str,
    amount,
    state: AddOnState = AddOnState.FORECASTED,
) -> List[BookingRecord]:
    """Appends an add-on to the booking. Extended stays are not add-ons."""
    if not name or not name.strip():
        raise ValueError("Add-on name is required")
    if any(k in name.lower() for k in BLOCKED_ADDON_KEYWORDS):
        raise ValueError("Extended stays are managed by the channel manager and cannot be added manually")

    addon = AddOn(
        category=AddOnCategory.parse(category),
        name=name.strip(),
        amount=to_money(amount),
        state=AddOnState.parse(state),
    )
    return _replace_booking(
        bookings, booking_id,
        lambda b: replace(b, add_ons=b.add_ons + [addon]),
    )


def remove_addon(bookings: List[BookingRecord], booking_id: str, addon_id: str) -> List[BookingRecord]:
    return _replace_booking(
        bookings, booking_id,
        lambda b: replace(b, add_ons=[a for a in b.add_ons if a.id != addon_id]),
    )


def set_addon_state(
    bookings: List[BookingRecord],
    booking_id: str,
    addon_id: str,
    state: AddOnState,
) -> List[BookingRecord]:
    """Moves an add-on to any state (no fixed order between states)."""
    new_state = AddOnState.parse(state)
    return _replace_booking(
        bookings, booking_id,
        lambda b: replace(b, add_ons=[
            replace(a, state=new_state) if a.id == addon_id else a for a in b.add_ons
        ]),
    )


def infer_units(bookings: List[BookingRecord]) -> List[UnitDefinition]:
    """One unit (with default values) for each distinct unit name, sorted."""
    names = sorted({b.unit for b in bookings if b.unit})
    return [
        UnitDefinition(
            name=name,
            type=UnitType.ENTIRE_UNIT,
            max_guests=DEFAULT_UNIT_MAX_GUESTS,
            base_nightly_rate=Decimal(DEFAULT_UNIT_NIGHTLY_RATE),
            include_in_occupancy=True,
        )
        for name in names
    ]


def filter_bookings(bookings: List[BookingRecord], guest_query: str = "", unit: str = "All") -> List[BookingRecord]:
    query = (guest_query or "").lower()
    result = [
        b for b in bookings
        if query in b.guest_name.lower() and (unit == "All" or b.unit == unit)
    ]
    return sorted(result, key=lambda b: b.check_in or date.min)
