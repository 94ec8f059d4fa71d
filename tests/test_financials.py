from decimal import Decimal

import pytest

from core.financials import bookings_in_month, calculate_financials, unit_contributions
from core.models import AddOnCategory, AddOnState, UnitDefinition, to_money


def test_island_hopping_actual_costs_one_trip(booking_factory, addon_factory):
    bookings = [booking_factory(
        "G1", "2025-12-10", "2025-12-12",
        add_ons=[addon_factory(AddOnCategory.ISLAND_HOPPING, AddOnState.ACTUAL, "5000")],
    )]
    m = calculate_financials(bookings, "2025-12", 0)

    assert m.variable_costs == Decimal("2600.00")
    assert m.total_expenses == Decimal("2600.00")


def test_revenue_definitions_are_distinct(booking_factory, mixed_addons):
    bookings = [booking_factory("G1", "2025-12-10", "2025-12-12", "10000", "4000", add_ons=mixed_addons)]
    m = calculate_financials(bookings, "2025-12", Decimal("1000"))

    assert m.base_revenue == Decimal("10000.00")
    # paid + Actual Tours (Transportation excluded)
    assert m.cash_received == Decimal("5500.00")
    # base + PreSold F&B only, Forecasted excluded
    assert m.expected_revenue == Decimal("10800.00")
    # base + Tours + F&B + Island Hopping (forecasted)
    assert m.potential_revenue == Decimal("15300.00")
    # the island hopping add-on is only forecasted
    assert m.variable_costs == Decimal("0.00")
    assert m.total_expenses == Decimal("1000.00")
    assert m.net_cash_position == Decimal("4500.00")
    assert m.break_even_met


def test_transportation_never_counts(booking_factory, addon_factory):
    add_ons = [addon_factory(AddOnCategory.TRANSPORTATION, s, "999") for s in AddOnState]
    bookings = [booking_factory("G1", "2025-12-10", "2025-12-12", "100", "0", add_ons=add_ons)]
    m = calculate_financials(bookings, "2025-12", 0)

    assert m.cash_received == Decimal("0.00")
    assert m.expected_revenue == Decimal("100.00")
    assert m.potential_revenue == Decimal("100.00")


def test_only_check_in_month_counts(booking_factory, addon_factory):
    bookings = [
        booking_factory("G1", "2025-11-29", "2025-12-03", "3000", "3000", add_ons=[
            addon_factory(AddOnCategory.ISLAND_HOPPING, AddOnState.ACTUAL),
        ]),
        booking_factory("G2", "2025-12-31", "2026-01-02", "500", "100"),
    ]
    m = calculate_financials(bookings, "2025-12", 0)

    assert m.base_revenue == Decimal("500.00")
    assert m.cash_received == Decimal("100.00")
    assert m.variable_costs == Decimal("0.00")
    assert [b.unit for b in bookings_in_month(bookings, "2025-11")] == ["G1"]


def test_empty_month(december_bookings):
    m = calculate_financials(december_bookings, "2026-03", Decimal("12000"))

    assert m.base_revenue == Decimal("0.00")
    assert m.cash_received == Decimal("0.00")
    assert m.total_expenses == Decimal("12000.00")
    assert m.net_cash_position == Decimal("-12000.00")
    assert not m.break_even_met


def test_many_small_amounts_do_not_drift(booking_factory):
    bookings = [booking_factory("G1", "2025-12-01", "2025-12-02", "0.10", "0.10", reference=str(i))
                for i in range(1000)]
    m = calculate_financials(bookings, "2025-12", 0)
    assert m.base_revenue == Decimal("100.00")
    assert m.cash_received == Decimal("100.00")


@pytest.mark.parametrize("fixed", [0, "0", 1234.56, Decimal("99999.99"), "abc"])
def test_expense_identities_hold_exactly(booking_factory, mixed_addons, addon_factory, fixed):
    add_ons = mixed_addons + [
        addon_factory(AddOnCategory.ISLAND_HOPPING, AddOnState.ACTUAL, "4000"),
        addon_factory(AddOnCategory.ISLAND_HOPPING, AddOnState.ACTUAL, "4000"),
    ]
    bookings = [booking_factory("G1", "2025-12-05", "2025-12-07", "26077.50", "13038.75", add_ons=add_ons)]
    m = calculate_financials(bookings, "2025-12", fixed)

    assert m.variable_costs == Decimal("5200.00")
    assert m.total_expenses == to_money(fixed) + m.variable_costs
    assert m.net_cash_position == m.cash_received - m.total_expenses


def test_unit_contributions(december_bookings):
    units = [UnitDefinition(name="G1"), UnitDefinition(name="G3"), UnitDefinition(name="G7")]
    result = {c.unit.name: c for c in unit_contributions(december_bookings, units, "2025-12")}

    assert result["G1"].projected_revenue == Decimal("4750.00")
    assert result["G1"].realized_revenue == Decimal("2250.00")
    assert result["G3"].projected_revenue == Decimal("52079.42")
    assert result["G3"].occupancy == pytest.approx(700 / 31)
    assert result["G7"].projected_revenue == Decimal("0.00")
    assert result["G7"].occupancy == 0.0


def test_unpadded_month_is_rejected(december_bookings):
    with pytest.raises(ValueError):
        calculate_financials(december_bookings, "2025-1", 0)
    assert calculate_financials(december_bookings, " 2025-12 ", 0).base_revenue == \
        calculate_financials(december_bookings, "2025-12", 0).base_revenue
