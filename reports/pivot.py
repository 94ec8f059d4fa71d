"""
Report tables built from the booking collection (pandas DataFrames for
st.dataframe):
  - booking list with add-on totals
  - per-unit contribution (booked / paid / occupancy) for a month
  - daily occupancy grid unit × day
  - summary per platform and per month
"""

import pandas as pd
from typing import List

from core.dates import month_window, dates_in_range, month_key_of
from core.financials import unit_contributions
from core.models import BookingRecord, UnitDefinition
from core.occupancy import is_occupied

BOOKING_COLUMNS = [
    "reference", "guest", "unit", "platform", "check_in", "check_out",
    "nights", "guests", "amount", "paid", "balance", "add_ons", "month",
]


def bookings_df(bookings: List[BookingRecord]) -> pd.DataFrame:
    """One row per booking. Money columns as float for display."""
    rows = []
    for b in bookings:
        rows.append({
            "reference": b.booking_reference,
            "guest": b.guest_name,
            "unit": b.unit,
            "platform": b.platform.value,
            "check_in": b.check_in,
            "check_out": b.check_out,
            "nights": b.nights,
            "guests": b.guests,
            "amount": float(b.amount),
            "paid": float(b.paid),
            "balance": float(b.amount - b.paid),
            "add_ons": float(sum(a.amount for a in b.add_ons)),
            "month": month_key_of(b.check_in),
        })
    if not rows:
        return pd.DataFrame(columns=BOOKING_COLUMNS)
    return pd.DataFrame(rows, columns=BOOKING_COLUMNS).sort_values("check_in").reset_index(drop=True)


def unit_contribution_df(
    bookings: List[BookingRecord],
    units: List[UnitDefinition],
    month_key: str,
) -> pd.DataFrame:
    """Break-even table: units included in occupancy stats only."""
    included = [u for u in units if u.include_in_occupancy]
    rows = []
    for c in unit_contributions(bookings, included, month_key):
        rows.append({
            "unit": c.unit.name,
            "projected": float(c.projected_revenue),
            "realized": float(c.realized_revenue),
            "occupancy": round(c.occupancy, 1),
        })
    return pd.DataFrame(rows, columns=["unit", "projected", "realized", "occupancy"])


def occupancy_grid_df(
    bookings: List[BookingRecord],
    units: List[UnitDefinition],
    month_key: str,
) -> pd.DataFrame:
    """Rows = units, columns = day of month, True where the night is occupied."""
    start, end = month_window(month_key)
    days = dates_in_range(start, end)
    data = {
        u.name: [is_occupied(u.name, d, bookings) for d in days]
        for u in units if u.include_in_occupancy
    }
    grid = pd.DataFrame.from_dict(data, orient="index", columns=[d.day for d in days])
    grid.index.name = "unit"
    return grid


def pivot_by_platform(df_bookings: pd.DataFrame) -> pd.DataFrame:
    """Summary per platform."""
    if df_bookings.empty:
        return pd.DataFrame()

    summary = df_bookings.groupby("platform").agg(
        bookings=("reference", "count"),
        amount_total=("amount", "sum"),
        paid_total=("paid", "sum"),
        nights_total=("nights", "sum"),
    ).reset_index()
    return summary.round(2)


def pivot_by_month_unit(df_bookings: pd.DataFrame) -> pd.DataFrame:
    """Pivot: month × unit, booked amount."""
    if df_bookings.empty:
        return pd.DataFrame()

    pivot = df_bookings.pivot_table(
        values="amount",
        index="month",
        columns="unit",
        aggfunc="sum",
        fill_value=0,
        margins=True,
        margins_name="TOTAL",
    )
    return pivot.round(2)
