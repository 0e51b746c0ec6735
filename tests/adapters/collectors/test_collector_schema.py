from __future__ import annotations

import pytest

from pricewatch.adapters.collectors import ScrapedPricePayload, parse_scraped_record
from pricewatch.domain.errors import ValidationError
from tests.helpers.catalog import scraped_record


def test_parse_scraped_record_maps_camel_case_fields() -> None:
    record = parse_scraped_record(scraped_record(brand="AcmeMaize", imageUrl="https://img/1.png"))

    assert record.commodity_name == "Maize"
    assert record.city_name == "Nairobi"
    assert record.country == "Kenya"
    assert record.price_value == "1200"
    assert record.source_url == "https://example.com/prices"
    assert record.brand == "AcmeMaize"
    assert record.image_url == "https://img/1.png"


def test_numeric_prices_keep_their_text_form() -> None:
    payload = ScrapedPricePayload.model_validate(scraped_record(priceValue=1200))

    assert payload.price_value == "1200"


def test_blank_optional_fields_become_none() -> None:
    record = parse_scraped_record(scraped_record(brand="   ", sourceUrl=""))

    assert record.brand is None
    assert record.source_url is None


def test_unknown_keys_are_ignored() -> None:
    record = parse_scraped_record(scraped_record(unexpected="value"))

    assert record.commodity_name == "Maize"


def test_missing_and_blank_fields_are_reported_together() -> None:
    data = scraped_record(priceValue="  ")
    del data["cityName"]

    with pytest.raises(ValidationError) as exc:
        parse_scraped_record(data)

    message = str(exc.value)
    assert message.startswith("Missing required field(s):")
    assert "cityName" in message
    assert "priceValue" in message


def test_malformed_fields_are_reported_as_invalid() -> None:
    with pytest.raises(ValidationError) as exc:
        parse_scraped_record(scraped_record(commodityName={"name": "Maize"}))

    assert str(exc.value) == "Invalid field(s): commodityName"
