"""SQLAlchemy table mappings for expenses and categories."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.types import TypeDecorator

from my_expenses.database import Base
from my_expenses.domain.entities import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    DEFAULT_CATEGORY_COLOR,
)
from my_expenses.domain.money import as_utc, utcnow


class UTCDateTime(TypeDecorator):
    """Store naive UTC timestamps and hand back aware UTC datetimes."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return as_utc(value).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return as_utc(value)


class Money(TypeDecorator):
    """Exact monetary amounts.

    SQLite has no decimal storage, so amounts are kept there as integer cents;
    other backends use ``NUMERIC(18, 2)``.
    """

    impl = Numeric(AMOUNT_MAX_DIGITS, AMOUNT_DECIMAL_PLACES)
    cache_ok = True

    def load_dialect_impl(self, dialect: Any) -> Any:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(AMOUNT_MAX_DIGITS, AMOUNT_DECIMAL_PLACES))

    def process_bind_param(self, value: Decimal | None, dialect: Any) -> Any:
        if value is None or dialect.name != "sqlite":
            return value
        return int(value.scaleb(AMOUNT_DECIMAL_PLACES))

    def process_result_value(self, value: Any, dialect: Any) -> Decimal | None:
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(value).scaleb(-AMOUNT_DECIMAL_PLACES)
        return Decimal(value)


class Category(Base):
    __tablename__ = "categories"

    id: str = Column(String(36), primary_key=True)
    name: str = Column(Text, unique=True, nullable=False, index=True)
    description: str | None = Column(Text, nullable=True)
    color: str = Column(
        Text,
        nullable=False,
        default=DEFAULT_CATEGORY_COLOR,
        server_default=DEFAULT_CATEGORY_COLOR,
    )


class Expense(Base):
    __tablename__ = "expenses"

    id: str = Column(String(36), primary_key=True)
    description: str = Column(Text, nullable=False)
    amount: Decimal = Column(Money, nullable=False)
    date: datetime = Column(UTCDateTime, nullable=False, index=True)
    category_id: str = Column(
        String(36),
        ForeignKey("categories.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: datetime = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: datetime | None = Column(UTCDateTime, nullable=True)


__all__ = ["Category", "Expense", "Money", "UTCDateTime"]
