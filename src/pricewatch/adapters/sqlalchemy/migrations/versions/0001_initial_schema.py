"""Initial schema: catalog, observations, workflows and audit log.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from pricewatch.adapters.sqlalchemy.mappings import DecimalString, UTCDateTime
from pricewatch.domain.model import (
    AuditAction,
    ChangeType,
    EntityType,
    SourceType,
    WorkflowStatus,
)

revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _enum(enum_cls: type, length: int) -> sa.Enum:
    return sa.Enum(enum_cls, native_enum=False, length=length)


def upgrade() -> None:
    op.create_table(
        "country",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_country"),
        sa.UniqueConstraint("name", name="uq_country_country_name"),
    )
    op.create_table(
        "brand",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_brand"),
        sa.UniqueConstraint("name", name="uq_brand_brand_name"),
    )
    op.create_table(
        "city",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("country_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["country_id"], ["country.id"], name="fk_city_country_id_country"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_city"),
    )
    op.create_index("ix_city_lower_name", "city", [sa.text("lower(name)")])

    op.create_table(
        "commodity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("brand_id", sa.Uuid(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["brand_id"], ["brand.id"], name="fk_commodity_brand_id_brand"),
        sa.PrimaryKeyConstraint("id", name="pk_commodity"),
    )
    op.create_index("ix_commodity_lower_name", "commodity", [sa.text("lower(name)")])

    op.create_table(
        "commodity_alias",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("commodity_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["commodity_id"],
            ["commodity.id"],
            name="fk_commodity_alias_commodity_id_commodity",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_commodity_alias"),
    )
    op.create_index(
        "ix_commodity_alias_lower_name", "commodity_alias", [sa.text("lower(name)")]
    )

    op.create_table(
        "source",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", _enum(SourceType, 32), nullable=False),
        sa.Column("url", sa.String(), nullable=True),
        sa.Column("trust_score", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_source"),
    )
    op.create_index("uq_source_lower_name", "source", [sa.text("lower(name)")], unique=True)

    op.create_table(
        "price_observation",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("commodity_id", sa.Uuid(), nullable=False),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=False),
        sa.Column("price_value", DecimalString(), nullable=False),
        sa.Column("price_currency", sa.String(length=8), nullable=False),
        sa.Column("price_unit", sa.String(), nullable=False),
        sa.Column("observed_at", UTCDateTime(), nullable=False),
        sa.Column("is_anomaly", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["commodity_id"],
            ["commodity.id"],
            name="fk_price_observation_commodity_id_commodity",
        ),
        sa.ForeignKeyConstraint(
            ["city_id"], ["city.id"], name="fk_price_observation_city_id_city"
        ),
        sa.ForeignKeyConstraint(
            ["source_id"], ["source.id"], name="fk_price_observation_source_id_source"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_price_observation"),
    )
    op.create_index(
        "ix_price_observation_lookup",
        "price_observation",
        ["commodity_id", "city_id", "source_id", "observed_at"],
    )

    op.create_table(
        "approval_workflow",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", _enum(EntityType, 32), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("change_type", _enum(ChangeType, 16), nullable=False),
        sa.Column("change_data", sa.JSON(), nullable=False),
        sa.Column("status", _enum(WorkflowStatus, 16), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("reviewer_id", sa.Uuid(), nullable=True),
        sa.Column("requested_at", UTCDateTime(), nullable=False),
        sa.Column("reviewed_at", UTCDateTime(), nullable=True),
        sa.Column("pending_key", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_approval_workflow"),
        sa.UniqueConstraint(
            "pending_key", name="uq_approval_workflow_approval_workflow_pending_key"
        ),
    )
    op.create_index(
        "ix_approval_workflow_pending",
        "approval_workflow",
        ["status", "entity_type", "change_type"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("action", _enum(AuditAction, 32), nullable=False),
        sa.Column("entity", _enum(EntityType, 32), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_audit_log"),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_approval_workflow_pending", table_name="approval_workflow")
    op.drop_table("approval_workflow")
    op.drop_index("ix_price_observation_lookup", table_name="price_observation")
    op.drop_table("price_observation")
    op.drop_index("uq_source_lower_name", table_name="source")
    op.drop_table("source")
    op.drop_index("ix_commodity_alias_lower_name", table_name="commodity_alias")
    op.drop_table("commodity_alias")
    op.drop_index("ix_commodity_lower_name", table_name="commodity")
    op.drop_table("commodity")
    op.drop_index("ix_city_lower_name", table_name="city")
    op.drop_table("city")
    op.drop_table("brand")
    op.drop_table("country")
