"""Entities, report aggregation and persistence contracts."""

from __future__ import annotations

from my_expenses.domain.entities import Category, Expense
from my_expenses.domain.errors import (
    ConflictError,
    ExpenseTrackerError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from my_expenses.domain.report import (
    IncomeItem,
    MonthlyReport,
    build_monthly_report,
    month_bounds,
)

__all__ = [
    "Category",
    "ConflictError",
    "Expense",
    "ExpenseTrackerError",
    "IncomeItem",
    "MonthlyReport",
    "NotFoundError",
    "ReferentialIntegrityError",
    "ValidationError",
    "build_monthly_report",
    "month_bounds",
]
