"""Expense and Category entities.

Both entities expose two constructors: ``create`` validates caller input and
assigns a fresh identity, ``reconstruct`` rehydrates rows that were validated
when they were written and therefore skips every check.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from my_expenses.domain.errors import ValidationError
from my_expenses.domain.money import as_utc, to_decimal, utcnow

DESCRIPTION_MAX_LENGTH = 500
AMOUNT_MAX_DIGITS = 18
AMOUNT_DECIMAL_PLACES = 2
DEFAULT_CATEGORY_COLOR = "#000000"

__all__ = [
    "AMOUNT_DECIMAL_PLACES",
    "AMOUNT_MAX_DIGITS",
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "DESCRIPTION_MAX_LENGTH",
    "Expense",
]


def _new_id() -> str:
    return str(uuid.uuid4())


def _validate_description(description: str) -> None:
    if not description or not description.strip():
        raise ValidationError("Description cannot be empty")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description must contain at most {DESCRIPTION_MAX_LENGTH} characters"
        )


def _validate_amount(amount: object) -> Decimal:
    value = to_decimal(amount)
    if value <= 0:
        raise ValidationError("Amount must be positive")
    if value.adjusted() >= AMOUNT_MAX_DIGITS - AMOUNT_DECIMAL_PLACES:
        raise ValidationError(
            f"Amount must have at most {AMOUNT_MAX_DIGITS - AMOUNT_DECIMAL_PLACES} integer digits"
        )
    if value != value.quantize(Decimal(1).scaleb(-AMOUNT_DECIMAL_PLACES)):
        raise ValidationError(
            f"Amount must have at most {AMOUNT_DECIMAL_PLACES} decimal places"
        )
    return value


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("Category name cannot be empty")


class Expense:
    """A single spending record attached to a category."""

    __slots__ = (
        "_id",
        "_created_at",
        "description",
        "amount",
        "date",
        "category_id",
        "updated_at",
    )

    def __init__(
        self,
        *,
        id: str,
        description: str,
        amount: Decimal,
        date: datetime,
        category_id: str,
        created_at: datetime,
        updated_at: datetime | None = None,
    ) -> None:
        self._id = id
        self._created_at = created_at
        self.description = description
        self.amount = amount
        self.date = date
        self.category_id = category_id
        self.updated_at = updated_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @classmethod
    def create(
        cls,
        description: str,
        amount: Decimal | int | float | str,
        date: date | datetime,
        category_id: str,
    ) -> Expense:
        """Validate the inputs and build a brand new expense.

        Raises:
            ValidationError: If ``description`` is blank or too long, or if
                ``amount`` is not strictly positive or does not fit the stored
                precision (16 integer digits, 2 decimal places).
        """

        _validate_description(description)
        value = _validate_amount(amount)
        return cls(
            id=_new_id(),
            description=description,
            amount=value,
            date=as_utc(date),
            category_id=category_id,
            created_at=utcnow(),
        )

    @classmethod
    def reconstruct(
        cls,
        id: str,
        description: str,
        amount: Decimal,
        date: datetime,
        category_id: str,
        created_at: datetime,
        updated_at: datetime | None = None,
    ) -> Expense:
        """Rehydrate a persisted expense without validating it again."""

        return cls(
            id=id,
            description=description,
            amount=amount,
            date=date,
            category_id=category_id,
            created_at=created_at,
            updated_at=updated_at,
        )

    def update(
        self,
        description: str,
        amount: Decimal | int | float | str,
        date: date | datetime,
        category_id: str,
    ) -> None:
        """Replace the four mutable fields together and stamp ``updated_at``.

        Validation matches :meth:`create` and runs before any field changes,
        so a rejected update leaves the expense untouched.
        """

        _validate_description(description)
        value = _validate_amount(amount)
        self.description = description
        self.amount = value
        self.date = as_utc(date)
        self.category_id = category_id
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "date": self.date,
            "category_id": self.category_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expense):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"Expense(id={self.id!r}, description={self.description!r}, "
            f"amount={self.amount!r}, category_id={self.category_id!r})"
        )


class Category:
    """A named bucket expenses are grouped into."""

    __slots__ = ("_id", "name", "description", "color")

    def __init__(
        self,
        *,
        id: str,
        name: str,
        description: str | None,
        color: str,
    ) -> None:
        self._id = id
        self.name = name
        self.description = description
        self.color = color

    @property
    def id(self) -> str:
        return self._id

    @classmethod
    def create(
        cls,
        name: str,
        description: str | None = None,
        color: str | None = None,
    ) -> Category:
        """Validate the name and build a new category.

        A falsy ``color`` falls back to :data:`DEFAULT_CATEGORY_COLOR`.
        Name uniqueness is enforced by the store, not here.
        """

        _validate_name(name)
        return cls(
            id=_new_id(),
            name=name,
            description=description,
            color=color or DEFAULT_CATEGORY_COLOR,
        )

    @classmethod
    def reconstruct(
        cls,
        id: str,
        name: str,
        description: str | None,
        color: str,
    ) -> Category:
        return cls(id=id, name=name, description=description, color=color)

    def update(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
    ) -> None:
        """Replace name, description and color with the rules of :meth:`create`."""

        _validate_name(name)
        self.name = name
        self.description = description
        self.color = color or DEFAULT_CATEGORY_COLOR

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Category(id={self.id!r}, name={self.name!r}, color={self.color!r})"
