"""GraphQL schema and resolvers for expenses, categories and monthly reports.

Resolvers stay thin: inputs are checked by the pydantic records in
:mod:`my_expenses.schemas`, entities enforce their own invariants, and the
repositories found in the request context do the storage work. Service errors
are turned into GraphQL errors carrying an ``extensions.code``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any

import pydantic
import strawberry
from fastapi import Depends
from graphql import GraphQLError
from sqlalchemy.orm import Session
from strawberry.extensions import SchemaExtension
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext, Info

from my_expenses import schemas
from my_expenses.database import Database
from my_expenses.domain.entities import Category, Expense
from my_expenses.domain.errors import (
    ConflictError,
    ExpenseTrackerError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from my_expenses.domain.report import IncomeItem, MonthlyReport, build_monthly_report
from my_expenses.domain.repositories import CategoryRepository, ExpenseRepository
from my_expenses.repositories import SqlCategoryRepository, SqlExpenseRepository

LOG = logging.getLogger(__name__)

BAD_USER_INPUT = "BAD_USER_INPUT"
ERROR_CODES: dict[type, str] = {
    ValidationError: "VALIDATION_ERROR",
    NotFoundError: "NOT_FOUND",
    ConflictError: "CONFLICT",
    ReferentialIntegrityError: "REFERENTIAL_INTEGRITY",
}
EXPECTED_CODES = frozenset({BAD_USER_INPUT, *ERROR_CODES.values()})


def _error_code(exc: ExpenseTrackerError) -> str:
    for error_type, code in ERROR_CODES.items():
        if isinstance(exc, error_type):
            return code
    return "INTERNAL_SERVER_ERROR"


def _describe_input_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise input and service errors as coded :class:`GraphQLError`."""

    try:
        yield
    except pydantic.ValidationError as exc:
        raise GraphQLError(
            f"Invalid input: {_describe_input_errors(exc)}",
            extensions={"code": BAD_USER_INPUT},
        ) from exc
    except ExpenseTrackerError as exc:
        extensions: dict[str, Any] = {"code": _error_code(exc)}
        if isinstance(exc, ReferentialIntegrityError):
            extensions["count"] = exc.count
        raise GraphQLError(str(exc), extensions=extensions) from exc


def _expenses(info: Info) -> ExpenseRepository:
    return info.context["expenses"]


def _categories(info: Info) -> CategoryRepository:
    return info.context["categories"]


@strawberry.type(name="Category")
class CategoryType:
    id: strawberry.ID
    name: str
    description: str | None
    color: str

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryType":
        return cls(
            id=strawberry.ID(category.id),
            name=category.name,
            description=category.description,
            color=category.color,
        )


@strawberry.type(name="Expense")
class ExpenseType:
    id: strawberry.ID
    description: str
    amount: Decimal
    date: datetime
    category_id: strawberry.ID
    created_at: datetime
    updated_at: datetime | None

    @strawberry.field
    def category(self, info: Info) -> CategoryType | None:
        category = _categories(info).find_by_id(str(self.category_id))
        return CategoryType.from_entity(category) if category is not None else None

    @classmethod
    def from_entity(cls, expense: Expense) -> "ExpenseType":
        return cls(
            id=strawberry.ID(expense.id),
            description=expense.description,
            amount=expense.amount,
            date=expense.date,
            category_id=strawberry.ID(expense.category_id),
            created_at=expense.created_at,
            updated_at=expense.updated_at,
        )


@strawberry.type(name="AdditionalIncome")
class IncomeItemType:
    description: str
    amount: Decimal

    @classmethod
    def from_item(cls, item: IncomeItem) -> "IncomeItemType":
        return cls(description=item.description, amount=item.amount)


@strawberry.type(name="MonthlyReport")
class MonthlyReportType:
    month: int
    month_name: str
    year: int
    salary: Decimal
    additional_income: list[IncomeItemType]
    total_expenses: Decimal
    total_additional_income: Decimal
    net_income: Decimal
    expenses: list[ExpenseType]

    @classmethod
    def from_report(cls, report: MonthlyReport) -> "MonthlyReportType":
        return cls(
            month=report.month,
            month_name=report.month_name,
            year=report.year,
            salary=report.salary,
            additional_income=[IncomeItemType.from_item(i) for i in report.additional_income],
            total_expenses=report.total_expenses,
            total_additional_income=report.total_additional_income,
            net_income=report.net_income,
            expenses=[ExpenseType.from_entity(e) for e in report.expenses],
        )


@strawberry.input(name="ExpenseInput")
class ExpenseInputType:
    description: str
    amount: Decimal
    date: datetime
    category_id: strawberry.ID

    def validated(self) -> schemas.ExpenseInput:
        return schemas.ExpenseInput(
            description=self.description,
            amount=self.amount,
            date=self.date,
            category_id=str(self.category_id),
        )


@strawberry.input(name="CategoryInput")
class CategoryInputType:
    name: str
    description: str | None = None
    color: str | None = None

    def validated(self) -> schemas.CategoryInput:
        return schemas.CategoryInput(
            name=self.name,
            description=self.description,
            color=self.color,
        )


@strawberry.input(name="AdditionalIncomeInput")
class IncomeItemInputType:
    description: str
    amount: Decimal


@strawberry.type
class Query:
    @strawberry.field
    def expenses(self, info: Info) -> list[ExpenseType]:
        return [ExpenseType.from_entity(e) for e in _expenses(info).find_all()]

    @strawberry.field
    def expense(self, info: Info, id: strawberry.ID) -> ExpenseType | None:
        expense = _expenses(info).find_by_id(str(id))
        return ExpenseType.from_entity(expense) if expense is not None else None

    @strawberry.field
    def expenses_by_category(self, info: Info, category_id: strawberry.ID) -> list[ExpenseType]:
        return [ExpenseType.from_entity(e) for e in _expenses(info).find_by_category(str(category_id))]

    @strawberry.field
    def expenses_by_month_and_year(self, info: Info, month: int, year: int) -> list[ExpenseType]:
        with translate_errors():
            expenses = _expenses(info).find_by_month_and_year(month, year)
        return [ExpenseType.from_entity(e) for e in expenses]

    @strawberry.field
    def expenses_monthly_report(
        self,
        info: Info,
        month: int,
        year: int,
        salary: Decimal,
        additional_income: list[IncomeItemInputType] | None = None,
    ) -> MonthlyReportType:
        with translate_errors():
            request = schemas.MonthlyReportRequest(
                month=month,
                year=year,
                salary=salary,
                additional_income=[
                    {"description": item.description, "amount": item.amount}
                    for item in additional_income or []
                ],
            )
            report = build_monthly_report(
                request.month,
                request.year,
                request.salary,
                request.income_items(),
                _expenses(info).find_by_month_and_year(request.month, request.year),
            )
        return MonthlyReportType.from_report(report)

    @strawberry.field
    def categories(self, info: Info) -> list[CategoryType]:
        return [CategoryType.from_entity(c) for c in _categories(info).find_all()]

    @strawberry.field
    def category(self, info: Info, id: strawberry.ID) -> CategoryType | None:
        category = _categories(info).find_by_id(str(id))
        return CategoryType.from_entity(category) if category is not None else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    def create_expense(self, info: Info, input: ExpenseInputType) -> ExpenseType:
        with translate_errors():
            data = input.validated()
            expense = Expense.create(data.description, data.amount, data.date, str(data.category_id))
            created = _expenses(info).create(expense)
        return ExpenseType.from_entity(created)

    @strawberry.mutation
    def update_expense(self, info: Info, id: strawberry.ID, input: ExpenseInputType) -> ExpenseType:
        with translate_errors():
            data = input.validated()
            repository = _expenses(info)
            existing = repository.find_by_id(str(id))
            if existing is None:
                raise NotFoundError(f"Expense {id} not found")
            existing.update(data.description, data.amount, data.date, str(data.category_id))
            updated = repository.update(existing)
        return ExpenseType.from_entity(updated)

    @strawberry.mutation
    def delete_expense(self, info: Info, id: strawberry.ID) -> bool:
        with translate_errors():
            _expenses(info).delete(str(id))
        return True

    @strawberry.mutation
    def create_category(self, info: Info, input: CategoryInputType) -> CategoryType:
        with translate_errors():
            data = input.validated()
            category = Category.create(data.name, data.description, data.color)
            created = _categories(info).create(category)
        return CategoryType.from_entity(created)

    @strawberry.mutation
    def update_category(self, info: Info, id: strawberry.ID, input: CategoryInputType) -> CategoryType:
        with translate_errors():
            data = input.validated()
            repository = _categories(info)
            existing = repository.find_by_id(str(id))
            if existing is None:
                raise NotFoundError(f"Category {id} not found")
            existing.update(data.name, data.description, data.color)
            updated = repository.update(existing)
        return CategoryType.from_entity(updated)

    @strawberry.mutation
    def delete_category(self, info: Info, id: strawberry.ID) -> bool:
        with translate_errors():
            _categories(info).delete(str(id))
        return True


class OperationLogger(SchemaExtension):
    """Log every GraphQL operation together with its duration."""

    def on_operation(self) -> Iterator[None]:
        started = time.perf_counter()
        yield
        elapsed_ms = (time.perf_counter() - started) * 1000
        name = self.execution_context.operation_name or "anonymous"
        LOG.info(
            "GraphQL operation %s finished in %.1f ms",
            name,
            elapsed_ms,
            extra={"operation": name, "duration_ms": elapsed_ms},
        )


class ExpenseSchema(strawberry.Schema):
    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        unexpected = []
        for error in errors:
            code = (error.extensions or {}).get("code")
            if code in EXPECTED_CODES:
                LOG.warning("GraphQL request rejected (%s): %s", code, error.message)
            else:
                unexpected.append(error)
        if unexpected:
            super().process_errors(unexpected, execution_context)


def build_schema() -> strawberry.Schema:
    return ExpenseSchema(query=Query, mutation=Mutation, extensions=[OperationLogger])


def build_graphql_router(database: Database, *, graphql_ide: bool = True) -> GraphQLRouter:
    """Create the ``/graphql`` router bound to ``database`` sessions."""

    def get_context(session: Session = Depends(database.get_session)) -> dict[str, Any]:
        return {
            "expenses": SqlExpenseRepository(session),
            "categories": SqlCategoryRepository(session),
        }

    return GraphQLRouter(
        build_schema(),
        context_getter=get_context,
        graphql_ide="graphiql" if graphql_ide else None,
    )


__all__ = ["build_graphql_router", "build_schema", "translate_errors"]
