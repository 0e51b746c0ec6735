"""Duplicate detection for incoming price observations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC
from enum import StrEnum
from typing import TYPE_CHECKING

from pricewatch.domain.errors import ValidationError
from pricewatch.domain.model import ChangeType, EntityType
from pricewatch.domain.review.payloads import PriceObservationCreate
from pricewatch.domain.time_windows import TimeWindow, calendar_day

if TYPE_CHECKING:
    from datetime import date, datetime, tzinfo
    from decimal import Decimal
    from uuid import UUID

    from pricewatch.domain.model import ApprovalWorkflow
    from pricewatch.domain.ports import PricewatchRepositories

log = logging.getLogger(__name__)


class DuplicateReason(StrEnum):
    OBSERVATION = "duplicate observation"
    PENDING_WORKFLOW = "duplicate pending"


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceCandidate:
    """A resolved observation that has not been checked yet."""

    commodity_id: UUID
    city_id: UUID
    source_id: UUID
    price_value: Decimal
    observed_at: datetime


@dataclass(frozen=True, slots=True)
class DuplicateCheck:
    duplicate: bool
    reason: DuplicateReason | None = None
    match_id: UUID | None = None


NOT_DUPLICATE = DuplicateCheck(duplicate=False)


class DeduplicationGuard:
    """Decide whether a candidate is already committed or already awaiting review.

    Facts are bucketed by calendar day in the reference timezone. Within a day a
    reading only counts as a duplicate at exactly the same price; a different
    price is a correction and goes on to review.
    """

    def __init__(self, repositories: PricewatchRepositories, *, timezone: tzinfo = UTC) -> None:
        self._repositories = repositories
        self._timezone = timezone

    def check(self, candidate: PriceCandidate) -> DuplicateCheck:
        window = TimeWindow.for_day(candidate.observed_at, self._timezone)

        committed = self._repositories.observations.find_in_window(
            commodity_id=candidate.commodity_id,
            city_id=candidate.city_id,
            source_id=candidate.source_id,
            window=window,
        )
        for observation in committed:
            if observation.price_value == candidate.price_value:
                return DuplicateCheck(True, DuplicateReason.OBSERVATION, observation.id)

        pending = self._repositories.workflows.pending_since(
            entity_type=EntityType.PRICE_OBSERVATION,
            change_type=ChangeType.CREATE,
            since=window.start,
        )
        day = calendar_day(candidate.observed_at, self._timezone)
        for workflow in pending:
            if self._matches(workflow, candidate, day):
                return DuplicateCheck(True, DuplicateReason.PENDING_WORKFLOW, workflow.id)

        return NOT_DUPLICATE

    def _matches(self, workflow: ApprovalWorkflow, candidate: PriceCandidate, day: date) -> bool:
        try:
            proposed = PriceObservationCreate.from_change_data(workflow.change_data)
        except ValidationError:
            log.warning("Skipping workflow %s with unreadable change data", workflow.id)
            return False
        return (
            proposed.commodity_id == candidate.commodity_id
            and proposed.city_id == candidate.city_id
            and proposed.source_id == candidate.source_id
            and calendar_day(proposed.observed_at, self._timezone) == day
            and proposed.price_value == candidate.price_value
        )
