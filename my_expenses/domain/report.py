"""Monthly financial report combining recorded expenses with income figures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from my_expenses.domain.entities import Expense
from my_expenses.domain.errors import ValidationError
from my_expenses.domain.money import to_decimal

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

__all__ = [
    "IncomeItem",
    "MONTH_NAMES",
    "MonthlyReport",
    "build_monthly_report",
    "month_bounds",
]


@dataclass(frozen=True, slots=True)
class IncomeItem:
    """Named additional income line (bonus, freelance work, refunds...)."""

    description: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "amount": self.amount}


@dataclass(frozen=True, slots=True)
class MonthlyReport:
    """Summary produced by :func:`build_monthly_report`.

    Attributes:
      month: Month number (1-12).
      month_name: English name of ``month``.
      year: Calendar year of the report.
      salary: Salary figure supplied by the caller.
      additional_income: Caller-supplied income items, unmodified and in order.
      total_expenses: Sum of every expense amount.
      total_additional_income: Sum of every additional income amount.
      net_income: ``salary + total_additional_income - total_expenses``.
      expenses: Expenses the report was computed from, unmodified.
    """

    month: int
    month_name: str
    year: int
    salary: Decimal
    additional_income: tuple[IncomeItem, ...]
    total_expenses: Decimal
    total_additional_income: Decimal
    net_income: Decimal
    expenses: tuple[Expense, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "month_name": self.month_name,
            "year": self.year,
            "salary": self.salary,
            "additional_income": [item.to_dict() for item in self.additional_income],
            "total_expenses": self.total_expenses,
            "total_additional_income": self.total_additional_income,
            "net_income": self.net_income,
            "expenses": [expense.to_dict() for expense in self.expenses],
        }


def _check_month(month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")


def month_bounds(month: int, year: int) -> tuple[datetime, datetime]:
    """Return the UTC range ``[start, end)`` covering the whole calendar month.

    Raises:
        ValidationError: If ``month`` is outside 1-12 or a bound falls outside
            the years :class:`~datetime.datetime` can represent.
    """

    _check_month(month)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    try:
        start = datetime(year, month, 1, tzinfo=UTC)
        end = datetime(next_year, next_month, 1, tzinfo=UTC)
    except (OverflowError, ValueError) as exc:
        raise ValidationError(
            f"{MONTH_NAMES[month - 1]} {year} is outside the supported calendar range"
        ) from exc
    return start, end


def build_monthly_report(
    month: int,
    year: int,
    salary: Decimal | int | float | str,
    additional_income: Sequence[IncomeItem],
    expenses: Sequence[Expense],
) -> MonthlyReport:
    """Aggregate a month of expenses against salary and additional income.

    The caller is responsible for fetching ``expenses`` already restricted to
    the requested month; nothing is filtered or queried here.

    Raises:
        ValidationError: If ``month`` is outside 1-12.
    """

    _check_month(month)
    salary_value = to_decimal(salary, field="salary")
    total_expenses = sum((to_decimal(e.amount) for e in expenses), Decimal(0))
    total_additional_income = sum(
        (to_decimal(item.amount) for item in additional_income), Decimal(0)
    )
    net_income = salary_value + total_additional_income - total_expenses
    return MonthlyReport(
        month=month,
        month_name=MONTH_NAMES[month - 1],
        year=year,
        salary=salary_value,
        additional_income=tuple(additional_income),
        total_expenses=total_expenses,
        total_additional_income=total_additional_income,
        net_income=net_income,
        expenses=tuple(expenses),
    )
