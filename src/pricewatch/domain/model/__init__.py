"""Public domain model surface."""

from __future__ import annotations

from pricewatch.domain.model.actor import Actor
from pricewatch.domain.model.audit import AuditLog
from pricewatch.domain.model.catalog import (
    DEFAULT_SCRAPER_TRUST_SCORE,
    Brand,
    City,
    Commodity,
    CommodityAlias,
    Country,
    Source,
)
from pricewatch.domain.model.entity import Entity, TypedEntity, new_id
from pricewatch.domain.model.enums import (
    AuditAction,
    ChangeType,
    EntityType,
    SourceType,
    UserRole,
    WorkflowStatus,
)
from pricewatch.domain.model.facts import PriceObservation
from pricewatch.domain.model.primitives import (
    MAX_PRICE_TEXT_LENGTH,
    CurrencyCode,
    PriceUnit,
    Url,
    canonical_price,
    parse_price,
)
from pricewatch.domain.model.workflow import ApprovalWorkflow

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "TypedEntity",
    "new_id",
    # catalog
    "Country",
    "City",
    "Commodity",
    "CommodityAlias",
    "Source",
    "Brand",
    "DEFAULT_SCRAPER_TRUST_SCORE",
    # facts
    "PriceObservation",
    # workflow
    "ApprovalWorkflow",
    # audit
    "AuditLog",
    # callers
    "Actor",
    # enums
    "AuditAction",
    "ChangeType",
    "EntityType",
    "SourceType",
    "UserRole",
    "WorkflowStatus",
    # primitives
    "MAX_PRICE_TEXT_LENGTH",
    "CurrencyCode",
    "PriceUnit",
    "Url",
    "canonical_price",
    "parse_price",
]
