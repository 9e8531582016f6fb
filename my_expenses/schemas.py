"""Pydantic input records validated before anything reaches the entities."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from my_expenses.domain.entities import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    DESCRIPTION_MAX_LENGTH,
)
from my_expenses.domain.report import IncomeItem


class InputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankText = Annotated[str, AfterValidator(_not_blank)]


class ExpenseInput(InputModel):
    description: NonBlankText = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
    )
    date: datetime
    category_id: UUID


class CategoryInput(InputModel):
    name: NonBlankText = Field(..., min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(None, max_length=32)


class IncomeItemInput(InputModel):
    description: str = Field(..., max_length=DESCRIPTION_MAX_LENGTH)
    amount: Decimal = Field(
        ...,
        ge=0,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
    )

    def to_domain(self) -> IncomeItem:
        return IncomeItem(description=self.description, amount=self.amount)


class MonthlyReportRequest(InputModel):
    month: int
    year: int
    salary: Decimal = Field(
        ...,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
    )
    additional_income: list[IncomeItemInput] = Field(default_factory=list)

    def income_items(self) -> list[IncomeItem]:
        return [item.to_domain() for item in self.additional_income]


__all__ = [
    "CategoryInput",
    "ExpenseInput",
    "IncomeItemInput",
    "MonthlyReportRequest",
]
