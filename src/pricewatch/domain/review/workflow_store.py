"""Persistence and state transitions of approval workflows."""

from __future__ import annotations

import logging
from datetime import UTC
from typing import TYPE_CHECKING, Any

from pricewatch.domain.errors import NotFoundError, StateConflictError, ValidationError
from pricewatch.domain.model import ApprovalWorkflow, WorkflowStatus
from pricewatch.domain.review.approval import ApprovalProcessor
from pricewatch.domain.review.audit import AuditLogger
from pricewatch.domain.review.payloads import (
    CommodityEnrichment,
    PriceObservationCreate,
    coerce_change_type,
    coerce_entity_type,
    decode_change,
)
from pricewatch.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import tzinfo
    from uuid import UUID

    from pricewatch.domain.model import ChangeType, EntityType
    from pricewatch.domain.ports import PricewatchRepositories
    from pricewatch.domain.time_windows import Clock

log = logging.getLogger(__name__)

_TERMINAL_STATES = frozenset({WorkflowStatus.APPROVED, WorkflowStatus.REJECTED})


class WorkflowStore:
    """Create workflows and move them out of PENDING, exactly once.

    ``PENDING -> APPROVED`` and ``PENDING -> REJECTED`` are the only transitions.
    Approval runs the ``ApprovalProcessor`` inside the caller's unit of work, so
    the status change is committed together with its side effects or not at all.
    """

    def __init__(
        self,
        repositories: PricewatchRepositories,
        *,
        timezone: tzinfo = UTC,
        clock: Clock = utcnow,
        processor: ApprovalProcessor | None = None,
    ) -> None:
        self._repositories = repositories
        self._timezone = timezone
        self._clock = clock
        self._processor = processor or ApprovalProcessor(
            repositories, AuditLogger(repositories.audit_logs, clock=clock)
        )

    def create(
        self,
        *,
        entity_type: EntityType | str,
        entity_id: UUID,
        change_type: ChangeType | str,
        change_data: Mapping[str, Any],
        requester_id: UUID,
    ) -> ApprovalWorkflow:
        """Validate and persist a PENDING workflow.

        Only pairs with a registered payload class can be created, so a
        well-formed ``(entity_type, change_type)`` such as ``CITY``/``DELETE`` is
        still refused with ``UnsupportedWorkflowTypeError``. This keeps storage
        free of workflows that could only ever be rejected.

        Raises ``ValidationError`` (including ``UnsupportedWorkflowTypeError``)
        and ``NotFoundError`` (a commodity update naming an unknown commodity)
        before anything is written, and ``DuplicatePendingWorkflowError`` when
        storage already holds an equivalent pending price creation.
        """

        resolved_entity_type = coerce_entity_type(entity_type)
        resolved_change_type = coerce_change_type(change_type)
        payload = decode_change(resolved_entity_type, resolved_change_type, change_data)
        if (
            isinstance(payload, CommodityEnrichment)
            and self._repositories.commodities.get(entity_id) is None
        ):
            raise NotFoundError(f"Commodity not found: {entity_id}")

        workflow = ApprovalWorkflow(
            entity_type=resolved_entity_type,
            entity_id=entity_id,
            change_type=resolved_change_type,
            change_data=payload.to_change_data(),
            status=WorkflowStatus.PENDING,
            requester_id=requester_id,
            requested_at=self._clock(),
        )
        if isinstance(payload, PriceObservationCreate):
            workflow.pending_key = payload.pending_key(self._timezone)

        self._repositories.workflows.add(workflow)
        log.info(
            "Created %s %s workflow %s for entity %s",
            resolved_entity_type,
            resolved_change_type,
            workflow.id,
            entity_id,
        )
        return workflow

    def approve(
        self,
        workflow_id: UUID,
        *,
        reviewer_id: UUID,
        overrides: Mapping[str, Any] | None = None,
    ) -> ApprovalWorkflow:
        return self.transition(
            workflow_id,
            WorkflowStatus.APPROVED,
            reviewer_id=reviewer_id,
            overrides=overrides,
        )

    def reject(self, workflow_id: UUID, *, reviewer_id: UUID) -> ApprovalWorkflow:
        return self.transition(workflow_id, WorkflowStatus.REJECTED, reviewer_id=reviewer_id)

    def transition(
        self,
        workflow_id: UUID,
        to: WorkflowStatus | str,
        *,
        reviewer_id: UUID,
        overrides: Mapping[str, Any] | None = None,
    ) -> ApprovalWorkflow:
        target = _coerce_target(to)

        workflow = self._repositories.workflows.get(workflow_id)
        if workflow is None:
            raise NotFoundError(f"Workflow not found: {workflow_id}")
        if not workflow.is_pending:
            raise StateConflictError(f"Workflow is not pending: {workflow_id}")

        payload = None
        if target is WorkflowStatus.APPROVED:
            # decode before any write so bad overrides leave the workflow untouched
            payload = decode_change(
                workflow.entity_type,
                workflow.change_type,
                workflow.change_data,
                overrides,
            )

        claimed = self._repositories.workflows.transition(
            workflow,
            to=target,
            reviewer_id=reviewer_id,
            reviewed_at=self._clock(),
        )
        if not claimed:
            raise StateConflictError(f"Workflow is not pending: {workflow_id}")

        if payload is not None:
            self._processor.apply(workflow, payload, reviewer_id=reviewer_id)

        log.info("Workflow %s %s by %s", workflow_id, target.lower(), reviewer_id)
        return workflow


def _coerce_target(value: WorkflowStatus | str) -> WorkflowStatus:
    try:
        target = WorkflowStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid workflow status: {value}") from exc
    if target not in _TERMINAL_STATES:
        raise ValidationError(f"Workflows can only move to APPROVED or REJECTED, not {target}")
    return target
