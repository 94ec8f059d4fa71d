from datetime import date
from decimal import Decimal

import pytest

from core.models import AddOn, AddOnCategory, AddOnState, BookingRecord, Platform


def make_booking(unit="G1", check_in="2025-12-20", check_out="2025-12-21",
                 amount="0", paid="0", reference="1000", add_ons=None, guest="Test Guest"):
    return BookingRecord(
        booking_reference=reference,
        guest_name=guest,
        unit=unit,
        platform=Platform.DIRECT,
        guests=2,
        check_in=date.fromisoformat(check_in),
        check_out=date.fromisoformat(check_out),
        amount=Decimal(amount),
        paid=Decimal(paid),
        add_ons=list(add_ons or []),
    )


def make_addon(category, state, amount="1000", name="extra"):
    return AddOn(category=category, name=name, amount=Decimal(amount), state=state)


@pytest.fixture
def booking_factory():
    return make_booking


@pytest.fixture
def addon_factory():
    return make_addon


@pytest.fixture
def december_bookings():
    """G3 back-to-back stays plus a two-unit booking on G1/G2."""
    return [
        make_booking("G3", "2025-12-15", "2025-12-18", "26077.50", "0", "26304"),
        make_booking("G3", "2025-12-18", "2025-12-22", "26001.92", "0", "26236"),
        make_booking("G1", "2025-12-20", "2025-12-21", "4750.00", "2250.00", "26363"),
        make_booking("G2", "2025-12-20", "2025-12-21", "4750.00", "2250.00", "26363"),
    ]


@pytest.fixture
def mixed_addons():
    return [
        make_addon(AddOnCategory.TOURS, AddOnState.ACTUAL, "1500"),
        make_addon(AddOnCategory.FOOD_BEVERAGE, AddOnState.PRE_SOLD, "800"),
        make_addon(AddOnCategory.ISLAND_HOPPING, AddOnState.FORECASTED, "3000"),
        make_addon(AddOnCategory.TRANSPORTATION, AddOnState.ACTUAL, "700"),
        make_addon(AddOnCategory.TRANSPORTATION, AddOnState.PRE_SOLD, "400"),
    ]
