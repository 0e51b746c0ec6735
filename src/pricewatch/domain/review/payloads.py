"""Typed change payloads carried by approval workflows.

A workflow stores its proposed change as a JSON snapshot (``change_data``). Each
supported ``(entity_type, change_type)`` pair has exactly one payload class that
knows how to read and write that snapshot. Pairs without a payload class are
refused when the workflow is created, so every stored workflow can be approved.

Snapshot keys are camelCase because they are the collectors' wire names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Final, Self
from uuid import UUID

from pricewatch.domain.errors import UnsupportedWorkflowTypeError, ValidationError
from pricewatch.domain.model import ChangeType, EntityType, canonical_price, parse_price
from pricewatch.domain.time_windows import calendar_day, parse_iso_datetime

if TYPE_CHECKING:
    from datetime import tzinfo
    from decimal import Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceObservationCreate:
    """Proposed price fact plus the enrichments to apply if it is approved."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PRICE_OBSERVATION
    CHANGE_TYPE: ClassVar[ChangeType] = ChangeType.CREATE

    commodity_id: UUID
    city_id: UUID
    source_id: UUID
    price_value: Decimal
    price_currency: str
    price_unit: str
    observed_at: datetime
    is_anomaly: bool = False
    brand: str | None = None
    image_url: str | None = None

    def __post_init__(self) -> None:
        if self.price_value < 0:
            raise ValidationError(f"Invalid price: {self.price_value}")

    @classmethod
    def from_change_data(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            commodity_id=_uuid(data, "commodityId"),
            city_id=_uuid(data, "cityId"),
            source_id=_uuid(data, "sourceId"),
            price_value=_price(data, "priceValue"),
            price_currency=_text(data, "priceCurrency"),
            price_unit=_text(data, "priceUnit"),
            observed_at=_timestamp(data, "observedAt"),
            is_anomaly=bool(data.get("isAnomaly", False)),
            brand=_optional_text(data, "brand"),
            image_url=_optional_text(data, "imageUrl"),
        )

    def to_change_data(self) -> dict[str, Any]:
        return {
            "commodityId": str(self.commodity_id),
            "cityId": str(self.city_id),
            "sourceId": str(self.source_id),
            "priceValue": str(self.price_value),
            "priceCurrency": self.price_currency,
            "priceUnit": self.price_unit,
            "observedAt": self.observed_at.isoformat(),
            "isAnomaly": self.is_anomaly,
            "brand": self.brand,
            "imageUrl": self.image_url,
        }

    def pending_key(self, tz: tzinfo) -> str:
        """Uniqueness key of this fact among pending workflows (same day, same price)."""
        day = calendar_day(self.observed_at, tz)
        return "|".join(
            (
                str(self.commodity_id),
                str(self.city_id),
                str(self.source_id),
                day.isoformat(),
                canonical_price(self.price_value),
            )
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CommodityEnrichment:
    """Fill-if-empty brand/image update for the commodity named by the workflow."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMMODITY
    CHANGE_TYPE: ClassVar[ChangeType] = ChangeType.UPDATE

    brand: str | None = None
    image_url: str | None = None

    def __post_init__(self) -> None:
        if not self.brand and not self.image_url:
            raise ValidationError("Commodity update needs a brand or an imageUrl")

    @classmethod
    def from_change_data(cls, data: Mapping[str, Any]) -> Self:
        return cls(brand=_optional_text(data, "brand"), image_url=_optional_text(data, "imageUrl"))

    def to_change_data(self) -> dict[str, Any]:
        return {"brand": self.brand, "imageUrl": self.image_url}


@dataclass(frozen=True, slots=True, kw_only=True)
class BrandCreate:
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.BRAND
    CHANGE_TYPE: ClassVar[ChangeType] = ChangeType.CREATE

    name: str

    @classmethod
    def from_change_data(cls, data: Mapping[str, Any]) -> Self:
        return cls(name=_text(data, "name"))

    def to_change_data(self) -> dict[str, Any]:
        return {"name": self.name}


type ChangePayload = PriceObservationCreate | CommodityEnrichment | BrandCreate

PAYLOAD_TYPES: Final[dict[tuple[EntityType, ChangeType], type[ChangePayload]]] = {
    (payload_cls.ENTITY_TYPE, payload_cls.CHANGE_TYPE): payload_cls
    for payload_cls in (PriceObservationCreate, CommodityEnrichment, BrandCreate)
}


def coerce_entity_type(value: EntityType | str) -> EntityType:
    try:
        return EntityType(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid entity type: {value}") from exc


def coerce_change_type(value: ChangeType | str) -> ChangeType:
    try:
        return ChangeType(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid change type: {value}") from exc


def payload_type_for(entity_type: EntityType, change_type: ChangeType) -> type[ChangePayload]:
    payload_cls = PAYLOAD_TYPES.get((entity_type, change_type))
    if payload_cls is None:
        raise UnsupportedWorkflowTypeError(
            f"Unsupported workflow type: {entity_type} {change_type}"
        )
    return payload_cls


def decode_change(
    entity_type: EntityType,
    change_type: ChangeType,
    change_data: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
) -> ChangePayload:
    """Build the typed payload from a snapshot, with ``overrides`` taking precedence."""

    payload_cls = payload_type_for(entity_type, change_type)
    merged = {**change_data, **(overrides or {})}
    return payload_cls.from_change_data(merged)


# Snapshot field readers ------------------------------------------------------


def _uuid(data: Mapping[str, Any], key: str) -> UUID:
    value = data.get(key)
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Missing or invalid {key}")
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValidationError(f"Missing or invalid {key}: {value}") from exc


def _text(data: Mapping[str, Any], key: str) -> str:
    value = _optional_text(data, key)
    if value is None:
        raise ValidationError(f"Missing {key}")
    return value


def _optional_text(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {key}: expected text")
    stripped = value.strip()
    return stripped or None


def _price(data: Mapping[str, Any], key: str) -> Decimal:
    value = data.get(key)
    try:
        return parse_price(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid price: {value}") from exc


def _timestamp(data: Mapping[str, Any], key: str) -> datetime:
    value = data.get(key)
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if not isinstance(value, str):
        raise ValidationError(f"Missing {key}")
    try:
        return parse_iso_datetime(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
