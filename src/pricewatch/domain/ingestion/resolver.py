"""Resolve free-text entity references against the catalog."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Final

from pricewatch.domain.model import DEFAULT_SCRAPER_TRUST_SCORE, Source

if TYPE_CHECKING:
    from pricewatch.domain.model import City, Commodity
    from pricewatch.domain.ports import PricewatchRepositories

log = logging.getLogger(__name__)

_CONTROL_CHARS: Final = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")


def sanitize_name(value: str) -> str:
    """Strip control characters and surrounding whitespace from a reported name."""

    return _CONTROL_CHARS.sub("", value).strip()


class EntityResolver:
    """Map reported names to catalog entities.

    City and commodity lookups are read-only and may come back empty. Source
    lookups never fail: an unknown source is registered as a scraper.
    """

    def __init__(
        self,
        repositories: PricewatchRepositories,
        *,
        scraper_trust_score: int = DEFAULT_SCRAPER_TRUST_SCORE,
    ) -> None:
        self._repositories = repositories
        self._scraper_trust_score = scraper_trust_score

    def resolve_city(self, name: str, country_name: str | None = None) -> City | None:
        """Case-insensitive city lookup.

        A known country scopes the search and its answer is final. An unknown or
        missing country falls back to the first city with that name anywhere.
        """

        city_name = sanitize_name(name)
        if country_name:
            country = self._repositories.countries.find_by_name(sanitize_name(country_name))
            if country is not None:
                return self._repositories.cities.find_by_name(city_name, country_id=country.id)
            log.debug("Unknown country %r, resolving city %r by name only", country_name, name)
        return self._repositories.cities.find_by_name(city_name)

    def resolve_commodity(self, name: str) -> Commodity | None:
        commodity_name = sanitize_name(name)
        commodity = self._repositories.commodities.find_by_name(commodity_name)
        if commodity is None:
            commodity = self._repositories.commodities.find_by_alias(commodity_name)
        return commodity

    def resolve_source(self, name: str, url: str | None = None) -> Source:
        source_name = sanitize_name(name)
        existing = self._repositories.sources.find_by_name(source_name)
        if existing is not None:
            return existing

        candidate = Source.discovered(source_name, url=url, trust_score=self._scraper_trust_score)
        source, created = self._repositories.sources.get_or_create(candidate)
        if created:
            log.info("Registered new scraper source %r (%s)", source.name, source.id)
        return source
