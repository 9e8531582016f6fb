from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from my_expenses.domain import Category, Expense, ValidationError

DESCRIPTIONS = st.text(min_size=1, max_size=500).filter(lambda text: text.strip() != "")
AMOUNTS = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("9999999999999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
DATES = st.datetimes(timezones=st.just(UTC))


@given(description=DESCRIPTIONS, amount=AMOUNTS, when=DATES, category_id=st.uuids())
def test_expense_survives_serialisation(
    description: str, amount: Decimal, when, category_id
) -> None:
    original = Expense.create(description, amount, when, str(category_id))

    clone = Expense.reconstruct(**original.to_dict())

    assert clone.to_dict() == original.to_dict()
    assert clone.amount == amount


@given(name=DESCRIPTIONS, color=st.sampled_from(["", None, "#123abc"]))
def test_category_color_default(name: str, color: str | None) -> None:
    category = Category.create(name, None, color)
    assert category.color == (color or "#000000")
    assert Category.reconstruct(**category.to_dict()) == category


@given(
    amount=st.decimals(min_value=Decimal("0.001"), max_value=Decimal("1000"), places=4).filter(
        lambda value: value != value.quantize(Decimal("0.01"))
    )
)
def test_sub_cent_amounts_are_rejected(amount: Decimal) -> None:
    with pytest.raises(ValidationError):
        Expense.create("Coffee", amount, datetime(2025, 3, 1, tzinfo=UTC), "cat")
