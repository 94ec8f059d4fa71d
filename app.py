"""
Palawan Collective - booking cash-flow dashboard.
Streamlit web app; storage on Google Sheets when configured, otherwise
local JSON files (config.DATA_DIR).
"""

import logging
import os
import sys
from datetime import date, timedelta

import pandas as pd
import streamlit as st

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CURRENCY_SYMBOL, LOG_LEVEL, MONTHS, TEMPLATE_FILENAME
from core.bookings import add_addon, build_manual_bookings, filter_bookings, remove_addon, set_addon_state
from core.deduplicator import merge_bookings
from core.excel_writer import month_workbook_bytes
from core.expenses import (
    delete_expense, expenses_for_month, fixed_expense_total,
    new_base_expense, new_monthly_expense, update_base_expense,
)
from core.financials import calculate_financials
from core.models import AddOnCategory, AddOnState, ExpenseCategory, Platform
from core.store import JsonFileStore, PropertyState
from parsers.booking_csv import ImportOutcome, bookings_to_csv, import_outcome, parse_booking_text, template_csv
from reports.pivot import (
    bookings_df, occupancy_grid_df, pivot_by_month_unit, pivot_by_platform, unit_contribution_df,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(
    page_title="Palawan Collective - Cash Flow",
    page_icon="🏝️",
    layout="wide",
)

st.title("🏝️ Palawan Collective - Cash Flow")


# ── Store ────────────────────────────────────────────────────────────────────
def sheets_configured() -> bool:
    try:
        _ = st.secrets["gcp_service_account"]
        _ = st.secrets["google_sheets"]["spreadsheet_id"]
        return True
    except Exception:
        return False


@st.cache_resource
def get_store():
    if sheets_configured():
        from core.sheets import SheetsStore
        return SheetsStore.open(
            st.secrets["gcp_service_account"],
            st.secrets["google_sheets"]["spreadsheet_id"],
        )
    return JsonFileStore()


if "state" not in st.session_state:
    st.session_state.state = PropertyState.load(get_store())
state: PropertyState = st.session_state.state


def money(val) -> str:
    return f"{CURRENCY_SYMBOL}{float(val):,.2f}"


# ── Sidebar ─────────────────────────────────────────────────────────────────
with st.sidebar:
    st.header("Period")
    current_month = st.selectbox("Month", MONTHS, index=MONTHS.index("2025-12"))
    occupancy_goal = st.slider("Occupancy goal %", 0, 100, 70)

    st.divider()
    if sheets_configured():
        st.success("✓ Google Sheets connected")
    else:
        st.info("Local storage (JSON files)")

    if st.button("Reset bookings to sample data"):
        state.reset()
        st.success("System reset. Expenses preserved.")


fixed_total = fixed_expense_total(state.base_expenses, state.monthly_expenses, current_month)
metrics = calculate_financials(state.bookings, current_month, fixed_total)

tab_dash, tab_bookings, tab_import, tab_expenses = st.tabs(
    ["📊 Dashboard", "🛏️ Bookings", "📥 Import", "💸 Expenses"]
)


# ============================================================
# TAB 1: DASHBOARD
# ============================================================
with tab_dash:
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Cash received", money(metrics.cash_received), help="Paid rooms + Actual add-ons (no Transportation)")
    k2.metric("Expected revenue", money(metrics.expected_revenue), help="Booked rooms + PreSold add-ons")
    k3.metric("Potential revenue", money(metrics.potential_revenue), help="Booked rooms + every add-on")
    k4.metric("Net cash position", money(metrics.net_cash_position))

    k5, k6, k7 = st.columns(3)
    k5.metric("Fixed expenses", money(fixed_total))
    k6.metric("Variable costs", money(metrics.variable_costs), help="Actual Island Hopping trips × (labor + fuel)")
    k7.metric("Total expenses", money(metrics.total_expenses))

    if metrics.break_even_met:
        st.success("Break-even met (cash)")
    else:
        st.error("Below break-even (cash)")

    st.subheader("Unit contribution")
    contrib = unit_contribution_df(state.bookings, state.units, current_month)
    if not contrib.empty:
        contrib["status"] = contrib["occupancy"].apply(
            lambda occ: "Occupancy goal met" if occ >= occupancy_goal else "Low occupancy"
        )
    st.dataframe(contrib, use_container_width=True, hide_index=True)

    st.subheader("Daily occupancy")
    grid = occupancy_grid_df(state.bookings, state.units, current_month)
    st.dataframe(grid.replace({True: "■", False: ""}), use_container_width=True)

    st.subheader("Export")
    xlsx = month_workbook_bytes(
        state.bookings, current_month, metrics,
        expenses_for_month(state.base_expenses, state.monthly_expenses, current_month),
    )
    st.download_button(
        "⬇️ Download month (Excel)",
        xlsx,
        file_name=f"cashflow_{current_month}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# ============================================================
# TAB 2: BOOKINGS
# ============================================================
with tab_bookings:
    col1, col2 = st.columns(2)
    with col1:
        guest_query = st.text_input("Search guest")
    with col2:
        unit_filter = st.selectbox("Unit", ["All"] + [u.name for u in state.units])

    shown = filter_bookings(state.bookings, guest_query, unit_filter)
    st.dataframe(bookings_df(shown), use_container_width=True, hide_index=True)

    st.subheader("By platform")
    st.dataframe(pivot_by_platform(bookings_df(state.bookings)), use_container_width=True, hide_index=True)

    st.subheader("By month and unit")
    st.dataframe(pivot_by_month_unit(bookings_df(state.bookings)), use_container_width=True)

    # ── Add-ons ──
    st.subheader("Add-ons")
    if shown:
        labels = {b.internal_id: f"{b.booking_reference} · {b.guest_name} · {b.unit} · {b.check_in}" for b in shown}
        booking_id = st.selectbox("Booking", list(labels), format_func=labels.get)
        booking = next(b for b in state.bookings if b.internal_id == booking_id)

        for addon in booking.add_ons:
            c1, c2, c3 = st.columns([3, 2, 1])
            c1.write(f"**{addon.name}** ({addon.category.value}) {money(addon.amount)}")
            new_state = c2.selectbox(
                "State", list(AddOnState), index=list(AddOnState).index(addon.state),
                format_func=lambda s: s.name.replace("_", " ").title(), key=f"state_{addon.id}",
            )
            if new_state is not addon.state:
                state.save_bookings(set_addon_state(state.bookings, booking_id, addon.id, new_state))
                st.rerun()
            if c3.button("🗑️", key=f"del_{addon.id}"):
                state.save_bookings(remove_addon(state.bookings, booking_id, addon.id))
                st.rerun()

        with st.form("addon_form", clear_on_submit=True):
            c1, c2, c3, c4 = st.columns(4)
            category = c1.selectbox("Category", list(AddOnCategory), format_func=lambda c: c.value)
            name = c2.text_input("Name")
            amount = c3.number_input("Amount", min_value=0.0, step=100.0)
            addon_state = c4.selectbox("State", list(AddOnState), format_func=lambda s: s.name.replace("_", " ").title())
            if st.form_submit_button("Add add-on"):
                try:
                    state.save_bookings(add_addon(state.bookings, booking_id, category, name, amount, addon_state))
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))

    # ── Manual entry ──
    st.subheader("New booking")
    with st.form("booking_form", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        guest_name = c1.text_input("Guest name")
        booking_ref = c2.text_input("Booking ID (optional)")
        platform = c3.selectbox("Platform", list(Platform), format_func=lambda p: p.value)
        selected_units = st.multiselect("Units", [u.name for u in state.units])
        c1, c2, c3 = st.columns(3)
        check_in = c1.date_input("Check-in", value=date.today())
        check_out = c2.date_input("Check-out", value=date.today() + timedelta(days=1))
        guests = c3.number_input("Guests", min_value=1, value=2)
        c1, c2 = st.columns(2)
        total_amount = c1.number_input("Total amount (all units)", min_value=0.0, step=100.0)
        paid_amount = c2.number_input("Paid (all units)", min_value=0.0, step=100.0)
        if st.form_submit_button("Add booking"):
            try:
                new = build_manual_bookings(
                    guest_name, selected_units, check_in, check_out,
                    total_amount, paid_amount, platform, guests, booking_ref or None,
                )
                state.save_bookings(state.bookings + new)
                st.success(f"Added {len(new)} new bookings.")
            except ValueError as e:
                st.error(str(e))


# ============================================================
# TAB 3: IMPORT
# ============================================================
with tab_import:
    st.header("Import bookings")

    st.download_button("⬇️ Blank template", template_csv(), file_name=TEMPLATE_FILENAME, mime="text/csv")
    st.download_button("⬇️ Export all bookings", bookings_to_csv(state.bookings),
                       file_name="bookings_export.csv", mime="text/csv")

    uploaded = st.file_uploader("CSV file", type=["csv", "txt"])
    pasted = st.text_area("...or paste the table here")

    text = uploaded.getvalue().decode("utf-8-sig", errors="replace") if uploaded else pasted
    if text and text.strip():
        records, errors = parse_booking_text(text)
        outcome = import_outcome(records, errors)

        if outcome is ImportOutcome.FAILED:
            st.error("Failed to parse any valid rows. See errors below.")
        elif outcome is ImportOutcome.NO_DATA:
            st.warning("File parsed but contained no data rows. Check that it is not only the header.")
        else:
            st.success(f"Ready to append {len(records)} bookings")
        for e in errors:
            st.error(e)

        if records:
            st.dataframe(bookings_df(records), use_container_width=True, hide_index=True)
            if st.button("✅ Append bookings", type="primary"):
                merged, added = merge_bookings(state.bookings, records)
                if added == 0:
                    st.info("No new bookings found.")
                else:
                    state.save_bookings(merged)
                    st.success(f"Appended {added} new bookings.")
    elif uploaded is not None:
        st.error("File is empty or unreadable.")


# ============================================================
# TAB 4: EXPENSES
# ============================================================
with tab_expenses:
    st.header(f"Fixed expenses - {current_month}")

    month_expenses = expenses_for_month(state.base_expenses, state.monthly_expenses, current_month)
    if month_expenses:
        st.dataframe(pd.DataFrame([{
            "name": e.name,
            "category": e.category.value,
            "amount": float(e.amount),
            "recurring": e.is_recurring,
        } for e in month_expenses]), use_container_width=True, hide_index=True)
    st.metric("Total fixed", money(fixed_total))

    with st.form("expense_form", clear_on_submit=True):
        c1, c2, c3, c4 = st.columns(4)
        exp_name = c1.text_input("Name")
        exp_category = c2.selectbox("Category", list(ExpenseCategory), format_func=lambda c: c.value)
        exp_amount = c3.number_input("Amount", min_value=0.0, step=100.0)
        recurring = c4.checkbox("Recurring")
        if st.form_submit_button("Add expense"):
            try:
                if recurring:
                    base = state.base_expenses + [new_base_expense(exp_name, exp_category, exp_amount)]
                    state.save_expenses(base, state.monthly_expenses)
                else:
                    monthly = state.monthly_expenses + [
                        new_monthly_expense(exp_name, exp_category, exp_amount, current_month)
                    ]
                    state.save_expenses(state.base_expenses, monthly)
                st.rerun()
            except ValueError as e:
                st.error(str(e))

    st.subheader("Recurring expenses")
    for e in state.base_expenses:
        c1, c2, c3 = st.columns([4, 1, 1])
        c1.write(f"**{e.name}** ({e.category.value}) {money(e.amount)}")
        active = c2.checkbox("Active", value=e.active, key=f"active_{e.id}")
        if active != e.active:
            state.save_expenses(update_base_expense(state.base_expenses, e.id, active=active), state.monthly_expenses)
            st.rerun()
        if c3.button("🗑️", key=f"del_exp_{e.id}"):
            state.save_expenses(*delete_expense(state.base_expenses, state.monthly_expenses, e.id))
            st.rerun()

    st.subheader("One-off expenses this month")
    for e in [m for m in state.monthly_expenses if m.month == current_month]:
        c1, c2 = st.columns([5, 1])
        c1.write(f"**{e.name}** ({e.category.value}) {money(e.amount)}")
        if c2.button("🗑️", key=f"del_exp_{e.id}"):
            state.save_expenses(*delete_expense(state.base_expenses, state.monthly_expenses, e.id))
            st.rerun()
