"""Helpers for exact monetary arithmetic and UTC timestamps."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation

from my_expenses.domain.errors import ValidationError

__all__ = ["as_utc", "to_decimal", "utcnow"]


def to_decimal(value: object, *, field: str = "amount") -> Decimal:
    """Coerce ``value`` into a finite :class:`~decimal.Decimal`.

    Floats go through their shortest ``repr`` so ``50.25`` stays ``50.25``
    instead of picking up binary noise.
    """

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValidationError(f"{field} must be a number") from exc
    else:
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def as_utc(value: date | datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive input is read as UTC."""

    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utcnow() -> datetime:
    return datetime.now(tz=UTC)
