"""
Excel export of a month: workbook with two sheets.

  - "summary"  → the monthly financial figures and the fixed expenses
  - "bookings" → the bookings checking in that month, one row per unit
"""

import io
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.financials import FinancialMetrics, bookings_in_month
from core.models import BookingRecord, Expense

BOOKING_HEADERS = [
    "booking_id", "guest_name", "platform", "unit", "check_in", "check_out",
    "nights", "total_amount", "paid_amount", "add_ons", "guests",
]

METRIC_LABELS = [
    ("Base revenue", "base_revenue"),
    ("Cash received", "cash_received"),
    ("Expected revenue", "expected_revenue"),
    ("Potential revenue", "potential_revenue"),
    ("Variable costs", "variable_costs"),
    ("Total expenses", "total_expenses"),
    ("Net cash position", "net_cash_position"),
]


def _autosize(ws):
    """Column width from the longest value (capped)."""
    for col_idx, col in enumerate(ws.iter_cols(values_only=True), start=1):
        width = max((len(str(v)) for v in col if v is not None), default=8)
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, 40)


def _write_summary(ws, month_key: str, metrics: FinancialMetrics, expenses: List[Expense]):
    ws.append(["Month", month_key])
    ws.append([])
    for label, attr in METRIC_LABELS:
        ws.append([label, round(float(getattr(metrics, attr)), 2)])
    ws.append(["Break-even met", "yes" if metrics.break_even_met else "no"])

    ws.append([])
    ws.append(["Expense", "Category", "Amount", "Recurring"])
    header_row = ws.max_row
    for e in expenses:
        ws.append([e.name, e.category.value, round(float(e.amount), 2), "yes" if e.is_recurring else "no"])
    for cell in ws[header_row]:
        cell.font = Font(bold=True)
    ws["A1"].font = Font(bold=True)


def _write_bookings(ws, bookings: List[BookingRecord]):
    ws.append(BOOKING_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for b in bookings:
        ws.append([
            b.booking_reference,
            b.guest_name,
            b.platform.value,
            b.unit,
            b.check_in,
            b.check_out,
            b.nights,
            round(float(b.amount), 2),
            round(float(b.paid), 2),
            round(float(sum(a.amount for a in b.add_ons)), 2),
            b.guests,
        ])
    for row in ws.iter_rows(min_row=2, min_col=5, max_col=6):
        for cell in row:
            cell.number_format = "yyyy-mm-dd"


def month_workbook_bytes(
    bookings: List[BookingRecord],
    month_key: str,
    metrics: FinancialMetrics,
    expenses: List[Expense],
) -> bytes:
    """XLSX bytes for st.download_button."""
    wb = Workbook()
    ws_summary = wb.active
    ws_summary.title = "summary"
    _write_summary(ws_summary, month_key, metrics, expenses)

    ws_bookings = wb.create_sheet("bookings")
    _write_bookings(ws_bookings, bookings_in_month(bookings, month_key))

    for ws in (ws_summary, ws_bookings):
        _autosize(ws)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
