"""Ports for persisting catalog, fact and workflow records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pricewatch.domain.model import (
    ApprovalWorkflow,
    AuditLog,
    Brand,
    City,
    Commodity,
    Country,
    PriceObservation,
    Source,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from pricewatch.domain.model import ChangeType, EntityType, WorkflowStatus
    from pricewatch.domain.time_windows import TimeWindow


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CountryRepository(Repository[Country], Protocol):
    def find_by_name(self, name: str) -> Country | None: ...


@runtime_checkable
class CityRepository(Repository[City], Protocol):
    def find_by_name(self, name: str, *, country_id: UUID | None = None) -> City | None:
        """Case-insensitive match, optionally scoped to one country."""
        ...


@runtime_checkable
class CommodityRepository(Repository[Commodity], Protocol):
    def get(self, commodity_id: UUID) -> Commodity | None: ...

    def find_by_name(self, name: str) -> Commodity | None: ...

    def find_by_alias(self, name: str) -> Commodity | None:
        """Return the owner of a case-insensitively matching alias."""
        ...


@runtime_checkable
class SourceRepository(Repository[Source], Protocol):
    def find_by_name(self, name: str) -> Source | None: ...

    def get_or_create(self, source: Source) -> tuple[Source, bool]:
        """Insert ``source`` unless one with the same name exists.

        Returns the stored row and whether it was created. Must stay correct when
        another writer inserts the same name concurrently.
        """
        ...


@runtime_checkable
class BrandRepository(Repository[Brand], Protocol):
    def find_by_name(self, name: str) -> Brand | None: ...

    def get_or_create(self, brand: Brand) -> tuple[Brand, bool]:
        """Same contract as ``SourceRepository.get_or_create`` (exact name match)."""
        ...


@runtime_checkable
class PriceObservationRepository(Repository[PriceObservation], Protocol):
    """``add`` raises ``DuplicateObservationError`` when the id is already taken."""

    def get(self, observation_id: UUID) -> PriceObservation | None: ...

    def find_in_window(
        self,
        *,
        commodity_id: UUID,
        city_id: UUID,
        source_id: UUID,
        window: TimeWindow,
    ) -> Sequence[PriceObservation]: ...


@runtime_checkable
class ApprovalWorkflowRepository(Repository[ApprovalWorkflow], Protocol):
    """``add`` raises ``DuplicatePendingWorkflowError`` on a pending-key conflict."""

    def get(self, workflow_id: UUID) -> ApprovalWorkflow | None: ...

    def pending_since(
        self,
        *,
        entity_type: EntityType,
        change_type: ChangeType,
        since: datetime,
    ) -> Sequence[ApprovalWorkflow]: ...

    def transition(
        self,
        workflow: ApprovalWorkflow,
        *,
        to: WorkflowStatus,
        reviewer_id: UUID,
        reviewed_at: datetime,
    ) -> bool:
        """Move a PENDING workflow to ``to``.

        Check and write are a single conditional update; returns False when the
        workflow was no longer pending.
        """
        ...


@runtime_checkable
class AuditLogRepository(Repository[AuditLog], Protocol):
    """``add`` raises ``AuditWriteError`` when the entry cannot be stored."""
