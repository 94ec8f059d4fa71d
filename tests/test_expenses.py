from decimal import Decimal

import pytest

from core.expenses import (
    delete_expense, expenses_for_month, fixed_expense_total,
    new_base_expense, new_monthly_expense, update_base_expense,
)
from core.models import ExpenseCategory


@pytest.fixture
def expenses():
    base = [
        new_base_expense("Staff", ExpenseCategory.LABOR, 30000),
        new_base_expense("Internet", "Utilities / Telecom", "2500.50"),
    ]
    monthly = [
        new_monthly_expense("Generator repair", ExpenseCategory.REPAIRS_MAINTENANCE, 4000, "2025-12"),
        new_monthly_expense("Cleaning", "Cleaning & Supplies", 1200, "2026-01"),
    ]
    return base, monthly


def test_fixed_total_uses_active_recurring_and_month_one_offs(expenses):
    base, monthly = expenses
    assert fixed_expense_total(base, monthly, "2025-12") == Decimal("36500.50")
    assert fixed_expense_total(base, monthly, "2026-01") == Decimal("33700.50")


def test_inactive_recurring_expense_is_left_out(expenses):
    base, monthly = expenses
    base = update_base_expense(base, base[0].id, active=False)

    assert fixed_expense_total(base, monthly, "2025-12") == Decimal("6500.50")
    assert [e.name for e in expenses_for_month(base, monthly, "2025-12")] == ["Internet", "Generator repair"]


def test_update_and_delete(expenses):
    base, monthly = expenses
    base = update_base_expense(base, base[1].id, amount="3000", category="Nonexistent")
    assert base[1].amount == Decimal("3000.00")
    assert base[1].category is ExpenseCategory.OTHER

    base, monthly = delete_expense(base, monthly, monthly[0].id)
    assert len(base) == 2
    assert [e.name for e in monthly] == ["Cleaning"]


def test_monthly_expense_needs_valid_month():
    with pytest.raises(ValueError):
        new_monthly_expense("x", ExpenseCategory.OTHER, 10, "Dec 2025")
    with pytest.raises(ValueError):
        new_base_expense("", ExpenseCategory.OTHER, 10)
