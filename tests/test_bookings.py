from datetime import date
from decimal import Decimal

import pytest

from core.bookings import (
    add_addon, build_manual_bookings, filter_bookings, infer_units, remove_addon, set_addon_state,
)
from core.models import AddOnCategory, AddOnState, Platform, UnitType


def test_manual_entry_splits_totals_across_selected_units():
    records = build_manual_bookings(
        "Kenny Puyong", ["G1", "G2", "G3"], date(2025, 12, 20), date(2025, 12, 21),
        amount=10000, paid="4500", platform=Platform.WEBSITE, guests=6, booking_reference="R-1",
    )

    assert [r.unit for r in records] == ["G1", "G2", "G3"]
    assert all(r.booking_reference == "R-1" for r in records)
    assert all(r.amount == Decimal("3333.33") for r in records)
    assert all(r.paid == Decimal("1500.00") for r in records)
    assert len({r.internal_id for r in records}) == 3


def test_manual_entry_generates_shared_reference():
    records = build_manual_bookings("A", ["G1", "G2"], date(2026, 1, 1), date(2026, 1, 2), 100, 0)
    assert records[0].booking_reference.startswith("REF-")
    assert records[0].booking_reference == records[1].booking_reference


def test_manual_entry_validation():
    with pytest.raises(ValueError):
        build_manual_bookings("A", [], date(2026, 1, 1), date(2026, 1, 2), 100, 0)
    with pytest.raises(ValueError):
        build_manual_bookings("A", ["G1"], date(2026, 1, 2), date(2026, 1, 2), 100, 0)


def test_add_addon_returns_new_collection(december_bookings):
    target = december_bookings[0]
    updated = add_addon(december_bookings, target.internal_id, AddOnCategory.ISLAND_HOPPING,
                        "Tour A", "2500", AddOnState.PRE_SOLD)

    assert december_bookings[0].add_ons == []
    addon = updated[0].add_ons[0]
    assert addon.category is AddOnCategory.ISLAND_HOPPING
    assert addon.amount == Decimal("2500.00")
    assert addon.state is AddOnState.PRE_SOLD
    assert updated[1] is december_bookings[1]


def test_extended_stay_is_rejected(december_bookings):
    with pytest.raises(ValueError):
        add_addon(december_bookings, december_bookings[0].internal_id,
                  AddOnCategory.OTHER, "Extended Stay 2 nights", 3000)


def test_unknown_booking_id(december_bookings):
    with pytest.raises(KeyError):
        add_addon(december_bookings, "missing", AddOnCategory.TOURS, "Tour", 100)


def test_addon_state_can_move_in_any_direction(december_bookings):
    booking_id = december_bookings[2].internal_id
    bookings = add_addon(december_bookings, booking_id, AddOnCategory.TOURS, "Kayak", 800, AddOnState.ACTUAL)
    addon_id = bookings[2].add_ons[0].id

    bookings = set_addon_state(bookings, booking_id, addon_id, AddOnState.FORECASTED)
    assert bookings[2].add_ons[0].state is AddOnState.FORECASTED
    bookings = set_addon_state(bookings, booking_id, addon_id, AddOnState.PRE_SOLD)
    assert bookings[2].add_ons[0].state is AddOnState.PRE_SOLD

    bookings = remove_addon(bookings, booking_id, addon_id)
    assert bookings[2].add_ons == []


def test_infer_units(december_bookings):
    units = infer_units(december_bookings)

    assert [u.name for u in units] == ["G1", "G2", "G3"]
    assert all(u.type is UnitType.ENTIRE_UNIT and u.include_in_occupancy for u in units)
    assert units[0].max_guests == 4
    assert units[0].base_nightly_rate == Decimal("5000")


def test_filter_bookings(booking_factory):
    bookings = [
        booking_factory("G2", "2026-01-05", "2026-01-06", guest="Luca Angelucci"),
        booking_factory("G1", "2026-01-01", "2026-01-02", guest="Alexa Kieker"),
        booking_factory("G1", "2026-01-03", "2026-01-04", guest="Luca Rossi"),
    ]
    assert [b.guest_name for b in filter_bookings(bookings, "luca")] == ["Luca Rossi", "Luca Angelucci"]
    assert [b.guest_name for b in filter_bookings(bookings, "", "G1")] == ["Alexa Kieker", "Luca Rossi"]
