from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from my_expenses.domain import Expense, IncomeItem, ValidationError, build_monthly_report

AMOUNTS = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
WHEN = datetime(2025, 3, 1, tzinfo=UTC)


@given(
    expense_amounts=st.lists(AMOUNTS, max_size=50),
    income_amounts=st.lists(AMOUNTS, max_size=10),
    salary=AMOUNTS,
    month=st.integers(min_value=1, max_value=12),
)
def test_net_income_balances_exactly(
    expense_amounts: list[Decimal],
    income_amounts: list[Decimal],
    salary: Decimal,
    month: int,
) -> None:
    expenses = [Expense.create("item", a, WHEN, "cat") for a in expense_amounts]
    income = [IncomeItem(description=f"line {i}", amount=a) for i, a in enumerate(income_amounts)]

    report = build_monthly_report(month, 2025, salary, income, expenses)

    expense_cents = sum(int(a * 100) for a in expense_amounts)
    income_cents = sum(int(a * 100) for a in income_amounts)
    assert report.total_expenses * 100 == expense_cents
    assert report.total_additional_income * 100 == income_cents
    assert report.net_income == salary + report.total_additional_income - report.total_expenses
    assert len(report.expenses) == len(expenses)


@given(month=st.integers().filter(lambda m: not 1 <= m <= 12))
def test_months_outside_calendar_are_rejected(month: int) -> None:
    with pytest.raises(ValidationError):
        build_monthly_report(month, 2025, 0, [], [])
