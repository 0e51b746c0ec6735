from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from pricewatch.domain.errors import ValidationError
from pricewatch.domain.model import (
    MAX_PRICE_TEXT_LENGTH,
    PriceObservation,
    canonical_price,
    new_id,
    parse_price,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1200", Decimal("1200")),
        (" 12.50 ", Decimal("12.50")),
        (7, Decimal(7)),
        (0.1, Decimal("0.1")),
        (Decimal("3.14"), Decimal("3.14")),
    ],
)
def test_parse_price_accepts_numbers_and_numeric_text(raw: object, expected: Decimal) -> None:
    assert parse_price(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "NaN", "Infinity", True, None, [1]])
def test_parse_price_rejects_non_finite_or_non_numeric(raw: object) -> None:
    with pytest.raises(ValueError, match="Invalid price"):
        parse_price(raw)


@pytest.mark.parametrize(
    "raw",
    ["1e1000000", "1e5000", "1e-1000000", "1" * (MAX_PRICE_TEXT_LENGTH + 1), "0." + "1" * 70],
)
def test_parse_price_rejects_prices_too_long_to_store(raw: str) -> None:
    with pytest.raises(ValueError, match="Invalid price"):
        parse_price(raw)


def test_parse_price_accepts_the_longest_storable_integer() -> None:
    raw = "9" * MAX_PRICE_TEXT_LENGTH

    assert canonical_price(parse_price(raw)) == raw


def test_parse_price_keeps_negative_sign_for_callers() -> None:
    assert parse_price("-5") == Decimal(-5)


def test_canonical_price_renders_equal_decimals_identically() -> None:
    assert canonical_price(Decimal("1200.00")) == canonical_price(Decimal("1200")) == "1200"
    assert canonical_price(Decimal("0.000")) == "0"
    assert canonical_price(Decimal("1E+3")) == "1000"
    assert canonical_price(Decimal("12.50")) == "12.5"


def test_price_observation_rejects_negative_price() -> None:
    with pytest.raises(ValidationError, match="Invalid price"):
        PriceObservation(
            commodity_id=new_id(),
            city_id=new_id(),
            source_id=new_id(),
            price_value=Decimal(-1),
            price_currency="KES",
            price_unit="kg",
            observed_at=datetime(2024, 3, 5, tzinfo=UTC),
        )
