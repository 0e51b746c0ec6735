"""Review entry points: each call is one unit of work."""

from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING, Any

from pricewatch.domain.authorization import require_role
from pricewatch.domain.errors import ValidationError
from pricewatch.domain.model import ChangeType, UserRole, new_id
from pricewatch.domain.review.payloads import coerce_change_type
from pricewatch.domain.review.workflow_store import WorkflowStore
from pricewatch.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import tzinfo
    from uuid import UUID

    from pricewatch.domain.model import Actor, ApprovalWorkflow, EntityType
    from pricewatch.domain.ports import PricewatchUnitOfWork
    from pricewatch.domain.time_windows import Clock

    UnitOfWorkFactory = Callable[[], PricewatchUnitOfWork]


def request_change(
    *,
    actor: Actor,
    entity_type: EntityType | str,
    change_type: ChangeType | str,
    change_data: Mapping[str, Any],
    unit_of_work_factory: UnitOfWorkFactory,
    entity_id: UUID | None = None,
    timezone: tzinfo = UTC,
    clock: Clock = utcnow,
) -> ApprovalWorkflow:
    """Open a workflow for an arbitrary supported change.

    ``entity_id`` names the target of an update or deletion and is required
    for both; for creations a fresh id is allocated when none is given.
    """

    resolved_change_type = coerce_change_type(change_type)
    if entity_id is None and resolved_change_type is not ChangeType.CREATE:
        raise ValidationError(f"entity_id is required for {resolved_change_type} changes")

    with unit_of_work_factory() as uow:
        store = WorkflowStore(uow.repositories, timezone=timezone, clock=clock)
        workflow = store.create(
            entity_type=entity_type,
            entity_id=entity_id or new_id(),
            change_type=resolved_change_type,
            change_data=change_data,
            requester_id=actor.user_id,
        )
        uow.commit()
    return workflow


def approve_workflow(
    workflow_id: UUID,
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory,
    overrides: Mapping[str, Any] | None = None,
    clock: Clock = utcnow,
) -> ApprovalWorkflow:
    require_role(actor, UserRole.ADMIN, action="approving a workflow")
    with unit_of_work_factory() as uow:
        store = WorkflowStore(uow.repositories, clock=clock)
        workflow = store.approve(workflow_id, reviewer_id=actor.user_id, overrides=overrides)
        uow.commit()
    return workflow


def reject_workflow(
    workflow_id: UUID,
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utcnow,
) -> ApprovalWorkflow:
    require_role(actor, UserRole.ADMIN, action="rejecting a workflow")
    with unit_of_work_factory() as uow:
        store = WorkflowStore(uow.repositories, clock=clock)
        workflow = store.reject(workflow_id, reviewer_id=actor.user_id)
        uow.commit()
    return workflow
