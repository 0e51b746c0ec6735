"""Wire schema for records delivered by price collectors."""

from __future__ import annotations

from .schema import ScrapedPricePayload
from .translator import parse_scraped_record, translate_payload

__all__ = ["ScrapedPricePayload", "parse_scraped_record", "translate_payload"]
