"""Pydantic models describing scraped price records."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_scalar(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float | Decimal):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class CollectorBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ScrapedPricePayload(CollectorBaseModel):
    """One scraped observation in the collectors' camelCase format.

    Numbers are accepted for any text field and kept as their string form so
    that prices reach the domain without passing through a float.
    """

    commodity_name: str = Field(alias="commodityName")
    city_name: str = Field(alias="cityName")
    country: str | None = None
    price_value: str = Field(alias="priceValue")
    price_currency: str = Field(alias="priceCurrency")
    price_unit: str = Field(alias="priceUnit")
    source_name: str = Field(alias="sourceName")
    source_url: str | None = Field(default=None, alias="sourceUrl")
    observed_at: str | None = Field(default=None, alias="observedAt")
    brand: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")

    _clean = field_validator("*", mode="before")(_clean_scalar)
