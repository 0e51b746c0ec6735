"""Committed price facts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from pricewatch.domain.errors import ValidationError
from pricewatch.domain.model.entity import TypedEntity
from pricewatch.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal
    from uuid import UUID

    from pricewatch.domain.model.primitives import CurrencyCode, PriceUnit


@dataclass(eq=False, kw_only=True)
class PriceObservation(TypedEntity):
    """A single reported price for a commodity in a city from a source.

    Immutable once committed. The id is usually the entity id pre-allocated by
    the approval workflow that proposed it.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PRICE_OBSERVATION

    commodity_id: UUID
    city_id: UUID
    source_id: UUID
    price_value: Decimal
    price_currency: CurrencyCode
    price_unit: PriceUnit
    observed_at: datetime
    is_anomaly: bool = False

    def __post_init__(self) -> None:
        if self.price_value < 0:
            raise ValidationError(f"Invalid price: {self.price_value}")
