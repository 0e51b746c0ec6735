"""Audit records for catalog mutations performed during approval."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pricewatch.domain.model.entity import Entity

if TYPE_CHECKING:
    from uuid import UUID

    from pricewatch.domain.model.enums import AuditAction, EntityType


@dataclass(eq=False, kw_only=True)
class AuditLog(Entity):
    """Append-only record of who changed which catalog entity and how."""

    user_id: UUID
    action: AuditAction
    entity: EntityType
    entity_id: UUID
    details: dict[str, Any] = field(default_factory=dict[str, Any])
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
