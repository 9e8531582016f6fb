"""Persistence interfaces the entities are stored through."""

from __future__ import annotations

from abc import ABC, abstractmethod

from my_expenses.domain.entities import Category, Expense

__all__ = ["CategoryRepository", "ExpenseRepository"]


class ExpenseRepository(ABC):
    """Storage contract for :class:`Expense` entities.

    Every listing is ordered newest ``date`` first.
    """

    @abstractmethod
    def find_by_id(self, expense_id: str) -> Expense | None:
        """Return the expense with ``expense_id`` or ``None``."""

    @abstractmethod
    def find_all(self) -> list[Expense]:
        """Return every stored expense."""

    @abstractmethod
    def find_by_category(self, category_id: str) -> list[Expense]:
        """Return the expenses attached to ``category_id``."""

    @abstractmethod
    def find_by_month_and_year(self, month: int, year: int) -> list[Expense]:
        """Return the expenses dated inside the given calendar month."""

    @abstractmethod
    def create(self, expense: Expense) -> Expense:
        """Persist a new expense; the referenced category must exist."""

    @abstractmethod
    def update(self, expense: Expense) -> Expense:
        """Persist changes to an existing expense; the category must exist."""

    @abstractmethod
    def delete(self, expense_id: str) -> None:
        """Remove the expense with ``expense_id``."""


class CategoryRepository(ABC):
    """Storage contract for :class:`Category` entities."""

    @abstractmethod
    def find_by_id(self, category_id: str) -> Category | None:
        """Return the category with ``category_id`` or ``None``."""

    @abstractmethod
    def find_all(self) -> list[Category]:
        """Return every category ordered alphabetically by name."""

    @abstractmethod
    def create(self, category: Category) -> Category:
        """Persist a new category; names are unique."""

    @abstractmethod
    def update(self, category: Category) -> Category:
        """Persist changes to an existing category."""

    @abstractmethod
    def delete(self, category_id: str) -> None:
        """Remove a category no expense refers to any more."""
