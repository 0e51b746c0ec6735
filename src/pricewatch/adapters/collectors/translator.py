"""Translate collector payloads into domain submissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError as PayloadValidationError

from pricewatch.domain.errors import ValidationError
from pricewatch.domain.ingestion import ScrapedPrice

from .schema import ScrapedPricePayload

if TYPE_CHECKING:
    from collections.abc import Mapping


def parse_scraped_record(data: Mapping[str, object]) -> ScrapedPrice:
    """Validate a raw record and return the domain view of it.

    Raises the domain ``ValidationError`` naming every missing or malformed field.
    """

    try:
        payload = ScrapedPricePayload.model_validate(data)
    except PayloadValidationError as exc:
        raise ValidationError(_describe(exc)) from exc
    return translate_payload(payload)


def translate_payload(payload: ScrapedPricePayload) -> ScrapedPrice:
    return ScrapedPrice(
        commodity_name=payload.commodity_name,
        city_name=payload.city_name,
        price_value=payload.price_value,
        price_currency=payload.price_currency,
        price_unit=payload.price_unit,
        source_name=payload.source_name,
        source_url=payload.source_url,
        observed_at=payload.observed_at,
        brand=payload.brand,
        country=payload.country,
        image_url=payload.image_url,
    )


def _describe(exc: PayloadValidationError) -> str:
    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        if error["type"] == "missing" or error.get("input") is None:
            missing.append(field)
        else:
            invalid.append(field)
    problems: list[str] = []
    if missing:
        problems.append(f"Missing required field(s): {', '.join(missing)}")
    if invalid:
        problems.append(f"Invalid field(s): {', '.join(invalid)}")
    return "; ".join(problems)
