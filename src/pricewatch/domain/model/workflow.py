"""Approval workflow records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pricewatch.domain.model.entity import Entity
from pricewatch.domain.model.enums import WorkflowStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from pricewatch.domain.model.enums import ChangeType, EntityType


@dataclass(eq=False, kw_only=True)
class ApprovalWorkflow(Entity):
    """A proposed mutation awaiting human review.

    ``entity_id`` is allocated when the workflow is created so the identity of
    the eventual entity is known before approval. ``change_data`` is the JSON
    snapshot captured at submission time.

    ``pending_key`` is a storage-level uniqueness key, set only while a price
    creation is pending.
    """

    entity_type: EntityType
    entity_id: UUID
    change_type: ChangeType
    change_data: dict[str, Any] = field(default_factory=dict[str, Any])
    status: WorkflowStatus = WorkflowStatus.PENDING
    requester_id: UUID
    reviewer_id: UUID | None = None
    requested_at: datetime
    reviewed_at: datetime | None = None
    pending_key: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == WorkflowStatus.PENDING
