"""
Fixed expenses: recurring (BaseExpense, every month while active) and
one-off (MonthlyExpense, a single YYYY-MM).
"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Tuple

from core.dates import parse_month_key
from core.models import BaseExpense, Expense, ExpenseCategory, MonthlyExpense, to_money


def expenses_for_month(
    base_expenses: List[BaseExpense],
    monthly_expenses: List[MonthlyExpense],
    month_key: str,
) -> List[Expense]:
    """Expenses that apply to the month: active recurring + that month's one-offs."""
    return (
        [e for e in base_expenses if e.active]
        + [e for e in monthly_expenses if e.month == month_key]
    )


def fixed_expense_total(
    base_expenses: List[BaseExpense],
    monthly_expenses: List[MonthlyExpense],
    month_key: str,
) -> Decimal:
    return sum(
        (e.amount for e in expenses_for_month(base_expenses, monthly_expenses, month_key)),
        Decimal("0.00"),
    )


def new_base_expense(name: str, category, amount) -> BaseExpense:
    if not name:
        raise ValueError("Expense name is required")
    return BaseExpense(name=name, category=ExpenseCategory.parse(category), amount=to_money(amount))


def new_monthly_expense(name: str, category, amount, month_key: str) -> MonthlyExpense:
    if not name:
        raise ValueError("Expense name is required")
    parse_month_key(month_key)
    return MonthlyExpense(
        name=name,
        category=ExpenseCategory.parse(category),
        amount=to_money(amount),
        month=month_key,
    )


def update_base_expense(base_expenses: List[BaseExpense], expense_id: str, **changes) -> List[BaseExpense]:
    """Changes name/category/amount/active of one recurring expense."""
    if "category" in changes:
        changes["category"] = ExpenseCategory.parse(changes["category"])
    if "amount" in changes:
        changes["amount"] = to_money(changes["amount"])
    return [replace(e, **changes) if e.id == expense_id else e for e in base_expenses]


def delete_expense(
    base_expenses: List[BaseExpense],
    monthly_expenses: List[MonthlyExpense],
    expense_id: str,
) -> Tuple[List[BaseExpense], List[MonthlyExpense]]:
    return (
        [e for e in base_expenses if e.id != expense_id],
        [e for e in monthly_expenses if e.id != expense_id],
    )
