import io
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from core.excel_writer import month_workbook_bytes
from core.expenses import new_base_expense
from core.financials import calculate_financials
from core.models import UnitDefinition
from reports.pivot import (
    bookings_df, occupancy_grid_df, pivot_by_month_unit, pivot_by_platform, unit_contribution_df,
)


def test_bookings_df(december_bookings):
    df = bookings_df(december_bookings)

    assert len(df) == 4
    assert df.iloc[0]["unit"] == "G3"
    assert df["amount"].sum() == pytest.approx(26077.50 + 26001.92 + 4750.00 * 2)
    assert set(df["month"]) == {"2025-12"}
    assert bookings_df([]).empty


def test_unit_contribution_df_skips_excluded_units(december_bookings):
    units = [
        UnitDefinition(name="G1"),
        UnitDefinition(name="G3"),
        UnitDefinition(name="Staff room", include_in_occupancy=False),
    ]
    df = unit_contribution_df(december_bookings, units, "2025-12")

    assert list(df["unit"]) == ["G1", "G3"]
    assert df.set_index("unit").loc["G3", "occupancy"] == 22.6


def test_occupancy_grid(december_bookings):
    units = [UnitDefinition(name="G3")]
    grid = occupancy_grid_df(december_bookings, units, "2025-12")

    assert grid.shape == (1, 31)
    assert [day for day in grid.columns if grid.loc["G3", day]] == [15, 16, 17, 18, 19, 20, 21]


def test_platform_and_month_pivots(december_bookings):
    df = bookings_df(december_bookings)

    by_platform = pivot_by_platform(df)
    assert by_platform["bookings"].sum() == 4

    pivot = pivot_by_month_unit(df)
    assert pivot.loc["2025-12", "G1"] == 4750.0
    assert pivot.loc["TOTAL", "TOTAL"] == pytest.approx(df["amount"].sum())


def test_month_workbook(december_bookings):
    metrics = calculate_financials(december_bookings, "2025-12", Decimal("30000"))
    expenses = [new_base_expense("Staff", "Labor", 30000)]

    data = month_workbook_bytes(december_bookings, "2025-12", metrics, expenses)
    wb = load_workbook(io.BytesIO(data))

    assert wb.sheetnames == ["summary", "bookings"]
    summary = {row[0]: row[1] for row in wb["summary"].iter_rows(values_only=True) if row and row[0]}
    assert summary["Month"] == "2025-12"
    assert summary["Net cash position"] == float(metrics.net_cash_position)
    assert wb["bookings"].max_row == 5
