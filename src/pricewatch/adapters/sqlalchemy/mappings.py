"""SQLAlchemy mapping metadata for the pricewatch domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from functools import cache
from typing import Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    func,
    orm,
)
from sqlalchemy.orm import configure_mappers

from pricewatch.domain.model import (
    MAX_PRICE_TEXT_LENGTH,
    ApprovalWorkflow,
    AuditAction,
    AuditLog,
    Brand,
    ChangeType,
    City,
    Commodity,
    CommodityAlias,
    Country,
    EntityType,
    PriceObservation,
    Source,
    SourceType,
    WorkflowStatus,
    canonical_price,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

PRICE_COLUMN_LENGTH: Final[int] = MAX_PRICE_TEXT_LENGTH


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DecimalString(TypeDecorator[Decimal]):
    """Exact decimal stored as its canonical text, so no backend rounds it."""

    impl = String(PRICE_COLUMN_LENGTH)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return canonical_price(Decimal(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog ---------------------------------------------------------------------

country_table = Table(
    "country",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
)

city_table = Table(
    "city",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("country_id", UUIDColumnType, ForeignKey("country.id"), nullable=False),
)

brand_table = Table(
    "brand",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
)

commodity_table = Table(
    "commodity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("brand_id", UUIDColumnType, ForeignKey("brand.id"), nullable=True),
    Column("image_url", String, nullable=True),
)

commodity_alias_table = Table(
    "commodity_alias",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("commodity_id", UUIDColumnType, ForeignKey("commodity.id"), nullable=False),
)

source_table = Table(
    "source",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("type", Enum(SourceType, native_enum=False, length=32), nullable=False),
    Column("url", String, nullable=True),
    Column("trust_score", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)

Index("ix_city_lower_name", func.lower(city_table.c.name))
Index("ix_commodity_lower_name", func.lower(commodity_table.c.name))
Index("ix_commodity_alias_lower_name", func.lower(commodity_alias_table.c.name))
# one source per case-insensitive name, so concurrent discovery cannot fork it
Index("uq_source_lower_name", func.lower(source_table.c.name), unique=True)

# Facts -----------------------------------------------------------------------

price_observation_table = Table(
    "price_observation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("commodity_id", UUIDColumnType, ForeignKey("commodity.id"), nullable=False),
    Column("city_id", UUIDColumnType, ForeignKey("city.id"), nullable=False),
    Column("source_id", UUIDColumnType, ForeignKey("source.id"), nullable=False),
    Column("price_value", DecimalString(), nullable=False),
    Column("price_currency", String(8), nullable=False),
    Column("price_unit", String, nullable=False),
    Column("observed_at", UTCDateTime(), nullable=False),
    Column("is_anomaly", Boolean, nullable=False, default=False),
    Index(
        "ix_price_observation_lookup",
        "commodity_id",
        "city_id",
        "source_id",
        "observed_at",
    ),
)

# Review ----------------------------------------------------------------------

approval_workflow_table = Table(
    "approval_workflow",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", Enum(EntityType, native_enum=False, length=32), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("change_type", Enum(ChangeType, native_enum=False, length=16), nullable=False),
    Column("change_data", JSON, nullable=False),
    Column("status", Enum(WorkflowStatus, native_enum=False, length=16), nullable=False),
    Column("requester_id", UUIDColumnType, nullable=False),
    Column("reviewer_id", UUIDColumnType, nullable=True),
    Column("requested_at", UTCDateTime(), nullable=False),
    Column("reviewed_at", UTCDateTime(), nullable=True),
    Column("pending_key", String, nullable=True, unique=True),
    Index("ix_approval_workflow_pending", "status", "entity_type", "change_type"),
)

audit_log_table = Table(
    "audit_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("user_id", UUIDColumnType, nullable=False),
    Column("action", Enum(AuditAction, native_enum=False, length=32), nullable=False),
    Column("entity", Enum(EntityType, native_enum=False, length=32), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("details", JSON, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_audit_log_entity", "entity", "entity_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables (idempotent)."""

    log.debug("Starting mappers")
    mapper_registry.map_imperatively(Country, country_table)
    mapper_registry.map_imperatively(City, city_table)
    mapper_registry.map_imperatively(Brand, brand_table)
    mapper_registry.map_imperatively(Commodity, commodity_table)
    mapper_registry.map_imperatively(CommodityAlias, commodity_alias_table)
    mapper_registry.map_imperatively(Source, source_table)
    mapper_registry.map_imperatively(PriceObservation, price_observation_table)
    mapper_registry.map_imperatively(ApprovalWorkflow, approval_workflow_table)
    mapper_registry.map_imperatively(AuditLog, audit_log_table)

    configure_mappers()
    return mapper_registry
