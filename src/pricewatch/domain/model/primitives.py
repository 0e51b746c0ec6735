"""Domain primitives: scalar aliases + price helpers.

Prices travel as strings from collectors and are held as exact decimals from
then on. Equality between prices is decimal equality, never float tolerance.
"""

from __future__ import annotations

from decimal import Context, Decimal, DecimalException, Inexact, InvalidOperation, Overflow
from typing import Final

type CurrencyCode = str
type PriceUnit = str
type Url = str

MAX_PRICE_TEXT_LENGTH: Final[int] = 64

_PRICE_CONTEXT: Final[Context] = Context(
    prec=MAX_PRICE_TEXT_LENGTH, traps=[Inexact, InvalidOperation, Overflow]
)


def parse_price(value: object) -> Decimal:
    """Parse a reported price into a finite ``Decimal``.

    Raises ``ValueError`` for anything that is not a finite number, or whose
    canonical text would exceed ``MAX_PRICE_TEXT_LENGTH``. Sign is not checked
    here; callers decide how to report negative prices.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid price: {value}")
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int | str):
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid price: {value}") from exc
    elif isinstance(value, float):
        # repr keeps the shortest round-tripping text ("0.1", not 0.1000000000000000055...)
        parsed = Decimal(repr(value))
    else:
        raise ValueError(f"Invalid price: {value}")
    if not parsed.is_finite():
        raise ValueError(f"Invalid price: {value}")
    # bound the exponent first so normalizing cannot overflow or build huge text
    if abs(parsed.adjusted()) >= MAX_PRICE_TEXT_LENGTH:
        raise ValueError(f"Invalid price: {value}")
    try:
        text = canonical_price(parsed)
    except DecimalException as exc:
        raise ValueError(f"Invalid price: {value}") from exc
    if len(text) > MAX_PRICE_TEXT_LENGTH:
        raise ValueError(f"Invalid price: {value}")
    return parsed


def canonical_price(value: Decimal) -> str:
    """Render a price so that equal decimals render identically ("1200.00" -> "1200").

    Raises ``decimal.Inexact`` when the price has more significant digits than
    ``MAX_PRICE_TEXT_LENGTH``.
    """

    normalized = value.normalize(_PRICE_CONTEXT)
    if normalized == 0:
        return "0"
    return format(normalized, "f")
