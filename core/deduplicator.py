"""
Duplicate check: avoids appending bookings already in the collection.

A booking is identified by reservation reference + unit (case-insensitive):
the same reference can legitimately appear on several units.
"""

import logging
from typing import List, Set, Tuple

from core.models import BookingRecord

logger = logging.getLogger(__name__)


def booking_signature(b: BookingRecord) -> str:
    return f"{b.booking_reference}|{b.unit}".lower()


def load_existing_signatures(bookings: List[BookingRecord]) -> Set[str]:
    return {booking_signature(b) for b in bookings}


def is_booking_duplicate(b: BookingRecord, existing_signatures: Set[str]) -> bool:
    return booking_signature(b) in existing_signatures


def merge_bookings(
    existing: List[BookingRecord],
    incoming: List[BookingRecord],
) -> Tuple[List[BookingRecord], int]:
    """
    Appends to `existing` the incoming bookings it does not have yet.

    Returns: (merged list, number of bookings added). Inputs are not modified.
    """
    existing_signatures = load_existing_signatures(existing)
    new_bookings = [b for b in incoming if not is_booking_duplicate(b, existing_signatures)]

    logger.info(
        "Import merge: %d new, %d already present",
        len(new_bookings), len(incoming) - len(new_bookings),
    )
    return list(existing) + new_bookings, len(new_bookings)
