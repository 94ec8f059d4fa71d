"""
Monthly financial figures.

Definitions (kept deliberately distinct):
  1. Cash Received     = paid room amounts + Actual add-ons
  2. Expected Revenue  = booked room amounts + PreSold add-ons
  3. Potential Revenue = booked room amounts + every add-on (any state)
  4. Variable Costs    = Actual Island Hopping trips × (labor + fuel)
  5. Net Cash Position = Cash Received - (fixed expenses + variable costs)

Add-ons count only when profit-generating (Transportation is pass-through).
A booking belongs to the month of its check-in, whatever its check-out.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import month_key_of, parse_month_key
from core.models import AddOnCategory, AddOnState, BookingRecord, UnitDefinition, CENT, to_money
from core.occupancy import calculate_occupancy
from config import ISLAND_HOPPING_FUEL, ISLAND_HOPPING_LABOR

ISLAND_HOPPING_TRIP_COST = Decimal(ISLAND_HOPPING_LABOR + ISLAND_HOPPING_FUEL)


@dataclass(frozen=True)
class FinancialMetrics:
    base_revenue: Decimal
    cash_received: Decimal
    expected_revenue: Decimal
    potential_revenue: Decimal
    variable_costs: Decimal
    total_expenses: Decimal
    net_cash_position: Decimal

    @property
    def break_even_met(self) -> bool:
        return self.net_cash_position >= 0


@dataclass(frozen=True)
class UnitContribution:
    unit: UnitDefinition
    projected_revenue: Decimal   # booked room amounts
    realized_revenue: Decimal    # paid room amounts
    occupancy: float


def _round(val: Decimal) -> Decimal:
    return val.quantize(CENT, rounding=ROUND_HALF_UP)


def bookings_in_month(bookings: Iterable[BookingRecord], month_key: str) -> List[BookingRecord]:
    """Bookings whose check-in falls in the month."""
    year, month = parse_month_key(month_key)
    key = f"{year:04d}-{month:02d}"
    return [b for b in bookings if b.check_in is not None and month_key_of(b.check_in) == key]


def calculate_financials(
    bookings: Iterable[BookingRecord],
    month_key: str,
    fixed_expense_total,
) -> FinancialMetrics:
    """Computes the monthly figures for bookings checking in during month_key."""
    base_revenue = Decimal("0")
    paid_base = Decimal("0")
    addon_actual = Decimal("0")
    addon_pre_sold = Decimal("0")
    addon_all = Decimal("0")
    island_hopping_trips = 0

    for b in bookings_in_month(bookings, month_key):
        base_revenue += b.amount
        paid_base += b.paid

        for addon in b.add_ons:
            if not addon.category.is_profit_generating:
                continue
            addon_all += addon.amount
            if addon.state is AddOnState.PRE_SOLD:
                addon_pre_sold += addon.amount
            elif addon.state is AddOnState.ACTUAL:
                addon_actual += addon.amount
                if addon.category is AddOnCategory.ISLAND_HOPPING:
                    island_hopping_trips += 1

    base_revenue = _round(base_revenue)
    cash_received = _round(paid_base + addon_actual)
    variable_costs = _round(island_hopping_trips * ISLAND_HOPPING_TRIP_COST)
    total_expenses = _round(to_money(fixed_expense_total) + variable_costs)

    return FinancialMetrics(
        base_revenue=base_revenue,
        cash_received=cash_received,
        expected_revenue=_round(base_revenue + addon_pre_sold),
        potential_revenue=_round(base_revenue + addon_all),
        variable_costs=variable_costs,
        total_expenses=total_expenses,
        net_cash_position=cash_received - total_expenses,
    )


def unit_contributions(
    bookings: List[BookingRecord],
    units: Iterable[UnitDefinition],
    month_key: str,
) -> List[UnitContribution]:
    """Per-unit room revenue (booked and paid) and occupancy for the month."""
    in_month = bookings_in_month(bookings, month_key)
    result = []
    for unit in units:
        unit_bookings = [b for b in in_month if b.unit == unit.name]
        result.append(UnitContribution(
            unit=unit,
            projected_revenue=_round(sum((b.amount for b in unit_bookings), Decimal("0"))),
            realized_revenue=_round(sum((b.paid for b in unit_bookings), Decimal("0"))),
            occupancy=calculate_occupancy(unit.name, month_key, bookings),
        ))
    return result
