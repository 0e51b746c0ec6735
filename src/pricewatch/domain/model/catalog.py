"""Catalog entities: resolution targets and enrichment targets.

The catalog is owned by an external curation workflow. Ingestion only reads it,
with two exceptions: sources are created on first sighting, and approved
submissions may fill a commodity's brand and image when those are still empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from pricewatch.domain.model.entity import Entity, TypedEntity
from pricewatch.domain.model.enums import EntityType, SourceType

if TYPE_CHECKING:
    from uuid import UUID

    from pricewatch.domain.model.primitives import Url

DEFAULT_SCRAPER_TRUST_SCORE: Final[int] = 50


@dataclass(eq=False, kw_only=True)
class Country(Entity):
    name: str


@dataclass(eq=False, kw_only=True)
class City(TypedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CITY

    name: str
    country_id: UUID


@dataclass(eq=False, kw_only=True)
class Brand(TypedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.BRAND

    name: str


@dataclass(eq=False, kw_only=True)
class Commodity(TypedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMMODITY

    name: str
    brand_id: UUID | None = None
    image_url: Url | None = None

    def assign_brand(self, brand: Brand) -> bool:
        """Fill the brand if it is still empty. Return whether anything changed."""
        if self.brand_id is not None:
            return False
        self.brand_id = brand.id
        return True

    def backfill_image(self, image_url: Url) -> bool:
        """Fill the image if it is still empty. Return whether anything changed."""
        if self.image_url:
            return False
        self.image_url = image_url
        return True


@dataclass(eq=False, kw_only=True)
class CommodityAlias(Entity):
    """Alternate commodity name. Resolves to its owner, carries no identity of its own."""

    name: str
    commodity_id: UUID


@dataclass(eq=False, kw_only=True)
class Source(TypedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SOURCE

    name: str
    type: SourceType
    url: Url | None = None
    trust_score: int = DEFAULT_SCRAPER_TRUST_SCORE
    is_active: bool = True

    @classmethod
    def discovered(
        cls,
        name: str,
        *,
        url: Url | None,
        trust_score: int = DEFAULT_SCRAPER_TRUST_SCORE,
    ) -> Source:
        """Build the record for a source first seen through ingestion."""
        return cls(
            name=name,
            type=SourceType.SCRAPER,
            url=url,
            trust_score=trust_score,
            is_active=True,
        )
