"""SQLAlchemy implementations of the expense and category repositories."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from my_expenses import models
from my_expenses.domain.entities import Category, Expense
from my_expenses.domain.errors import (
    ConflictError,
    NotFoundError,
    ReferentialIntegrityError,
)
from my_expenses.domain.report import month_bounds
from my_expenses.domain.repositories import CategoryRepository, ExpenseRepository

LOG = logging.getLogger(__name__)


def _expense_from_row(row: models.Expense) -> Expense:
    return Expense.reconstruct(
        row.id,
        row.description,
        row.amount,
        row.date,
        row.category_id,
        row.created_at,
        row.updated_at,
    )


def _category_from_row(row: models.Category) -> Category:
    return Category.reconstruct(row.id, row.name, row.description, row.color)


class SqlExpenseRepository(ExpenseRepository):
    """Expense storage on top of a caller-owned SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _list(self, *criteria: Any) -> list[Expense]:
        stmt = select(models.Expense)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = stmt.order_by(models.Expense.date.desc(), models.Expense.created_at.desc())
        return [_expense_from_row(row) for row in self._session.scalars(stmt)]

    def _require_category(self, category_id: str) -> None:
        if self._session.get(models.Category, category_id) is None:
            LOG.warning("Rejected expense write for missing category %s", category_id)
            raise NotFoundError(f"Category with id {category_id} does not exist")

    def find_by_id(self, expense_id: str) -> Expense | None:
        row = self._session.get(models.Expense, expense_id)
        return _expense_from_row(row) if row is not None else None

    def find_all(self) -> list[Expense]:
        return self._list()

    def find_by_category(self, category_id: str) -> list[Expense]:
        return self._list(models.Expense.category_id == category_id)

    def find_by_month_and_year(self, month: int, year: int) -> list[Expense]:
        start, end = month_bounds(month, year)
        return self._list(models.Expense.date >= start, models.Expense.date < end)

    def create(self, expense: Expense) -> Expense:
        self._require_category(expense.category_id)
        row = models.Expense(
            id=expense.id,
            description=expense.description,
            amount=expense.amount,
            date=expense.date,
            category_id=expense.category_id,
            created_at=expense.created_at,
            updated_at=expense.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        LOG.info("Created expense %s in category %s", row.id, row.category_id)
        return _expense_from_row(row)

    def update(self, expense: Expense) -> Expense:
        row = self._session.get(models.Expense, expense.id)
        if row is None:
            raise NotFoundError(f"Expense {expense.id} not found")
        self._require_category(expense.category_id)
        row.description = expense.description
        row.amount = expense.amount
        row.date = expense.date
        row.category_id = expense.category_id
        row.updated_at = expense.updated_at
        self._session.flush()
        self._session.refresh(row)
        LOG.info("Updated expense %s", row.id)
        return _expense_from_row(row)

    def delete(self, expense_id: str) -> None:
        row = self._session.get(models.Expense, expense_id)
        if row is None:
            raise NotFoundError(f"Expense {expense_id} not found")
        self._session.delete(row)
        self._session.flush()
        LOG.info("Deleted expense %s", expense_id)


class SqlCategoryRepository(CategoryRepository):
    """Category storage on top of a caller-owned SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _ensure_unique_name(self, category: Category) -> None:
        stmt = select(models.Category.id).where(
            models.Category.name == category.name,
            models.Category.id != category.id,
        )
        if self._session.scalar(stmt) is not None:
            LOG.warning("Rejected duplicate category name %r", category.name)
            raise ConflictError(f"Category name {category.name!r} already exists")

    def _flush(self) -> None:
        try:
            self._session.flush()
        except IntegrityError as exc:  # pragma: no cover - concurrent insert race
            raise ConflictError("Category name must be unique") from exc

    def find_by_id(self, category_id: str) -> Category | None:
        row = self._session.get(models.Category, category_id)
        return _category_from_row(row) if row is not None else None

    def find_all(self) -> list[Category]:
        stmt = select(models.Category).order_by(models.Category.name)
        return [_category_from_row(row) for row in self._session.scalars(stmt)]

    def create(self, category: Category) -> Category:
        self._ensure_unique_name(category)
        row = models.Category(
            id=category.id,
            name=category.name,
            description=category.description,
            color=category.color,
        )
        self._session.add(row)
        self._flush()
        self._session.refresh(row)
        LOG.info("Created category %s (%s)", row.name, row.id)
        return _category_from_row(row)

    def update(self, category: Category) -> Category:
        row = self._session.get(models.Category, category.id)
        if row is None:
            raise NotFoundError(f"Category {category.id} not found")
        self._ensure_unique_name(category)
        row.name = category.name
        row.description = category.description
        row.color = category.color
        self._flush()
        self._session.refresh(row)
        LOG.info("Updated category %s", row.id)
        return _category_from_row(row)

    def delete(self, category_id: str) -> None:
        row = self._session.get(models.Category, category_id)
        if row is None:
            raise NotFoundError(f"Category {category_id} not found")
        count_stmt = (
            select(func.count())
            .select_from(models.Expense)
            .where(models.Expense.category_id == category_id)
        )
        count = int(self._session.scalar(count_stmt) or 0)
        if count > 0:
            LOG.warning("Refused to delete category %s referenced by %d expense(s)", category_id, count)
            raise ReferentialIntegrityError(
                f"Cannot delete category: {count} expense(s) are associated with this category",
                count=count,
            )
        self._session.delete(row)
        self._session.flush()
        LOG.info("Deleted category %s", category_id)


__all__ = ["SqlCategoryRepository", "SqlExpenseRepository"]
