"""Repository implementations backed by SQLAlchemy sessions.

Inserts that may race with another writer run inside a SAVEPOINT, so a lost
race only rolls back that insert and leaves the surrounding unit of work usable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import FlushError

from pricewatch.adapters.sqlalchemy.mappings import (
    approval_workflow_table,
    brand_table,
    city_table,
    commodity_alias_table,
    commodity_table,
    country_table,
    price_observation_table,
    source_table,
)
from pricewatch.domain.errors import (
    AuditWriteError,
    DuplicateObservationError,
    DuplicatePendingWorkflowError,
)
from pricewatch.domain.model import (
    ApprovalWorkflow,
    AuditLog,
    Brand,
    City,
    Commodity,
    Country,
    PriceObservation,
    Source,
    WorkflowStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from pricewatch.domain.model import ChangeType, EntityType
    from pricewatch.domain.time_windows import TimeWindow

log = logging.getLogger(__name__)


def _insert_or_fetch[TEntity](
    session: Session,
    entity: TEntity,
    find_existing: Callable[[], TEntity | None],
) -> tuple[TEntity, bool]:
    existing = find_existing()
    if existing is not None:
        return existing, False
    try:
        with session.begin_nested():
            session.add(entity)
    except IntegrityError:
        winner = find_existing()
        if winner is None:
            raise
        log.debug("Concurrent insert won for %r, reusing it", winner)
        return winner, False
    return entity, True


class SqlAlchemyCountryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Country) -> None:
        self.session.add(entity)

    def find_by_name(self, name: str) -> Country | None:
        stmt = select(Country).where(country_table.c.name == name).limit(1)
        return self.session.scalars(stmt).first()


class SqlAlchemyCityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: City) -> None:
        self.session.add(entity)

    def find_by_name(self, name: str, *, country_id: UUID | None = None) -> City | None:
        stmt = select(City).where(func.lower(city_table.c.name) == name.lower())
        if country_id is not None:
            stmt = stmt.where(city_table.c.country_id == country_id)
        return self.session.scalars(stmt.limit(1)).first()


class SqlAlchemyCommodityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Commodity) -> None:
        self.session.add(entity)

    def get(self, commodity_id: UUID) -> Commodity | None:
        return self.session.get(Commodity, commodity_id)

    def find_by_name(self, name: str) -> Commodity | None:
        stmt = select(Commodity).where(func.lower(commodity_table.c.name) == name.lower())
        return self.session.scalars(stmt.limit(1)).first()

    def find_by_alias(self, name: str) -> Commodity | None:
        stmt = (
            select(Commodity)
            .join(
                commodity_alias_table,
                commodity_alias_table.c.commodity_id == commodity_table.c.id,
            )
            .where(func.lower(commodity_alias_table.c.name) == name.lower())
            .limit(1)
        )
        return self.session.scalars(stmt).first()


class SqlAlchemySourceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Source) -> None:
        self.session.add(entity)

    def find_by_name(self, name: str) -> Source | None:
        stmt = select(Source).where(func.lower(source_table.c.name) == name.lower())
        return self.session.scalars(stmt.limit(1)).first()

    def get_or_create(self, source: Source) -> tuple[Source, bool]:
        return _insert_or_fetch(self.session, source, lambda: self.find_by_name(source.name))


class SqlAlchemyBrandRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Brand) -> None:
        self.session.add(entity)

    def find_by_name(self, name: str) -> Brand | None:
        stmt = select(Brand).where(brand_table.c.name == name).limit(1)
        return self.session.scalars(stmt).first()

    def get_or_create(self, brand: Brand) -> tuple[Brand, bool]:
        return _insert_or_fetch(self.session, brand, lambda: self.find_by_name(brand.name))


class SqlAlchemyPriceObservationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PriceObservation) -> None:
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except (IntegrityError, FlushError) as exc:
            raise DuplicateObservationError(
                f"Observation already exists: {entity.id}"
            ) from exc

    def get(self, observation_id: UUID) -> PriceObservation | None:
        return self.session.get(PriceObservation, observation_id)

    def find_in_window(
        self,
        *,
        commodity_id: UUID,
        city_id: UUID,
        source_id: UUID,
        window: TimeWindow,
    ) -> list[PriceObservation]:
        stmt = (
            select(PriceObservation)
            .where(price_observation_table.c.commodity_id == commodity_id)
            .where(price_observation_table.c.city_id == city_id)
            .where(price_observation_table.c.source_id == source_id)
            .where(price_observation_table.c.observed_at >= window.start)
            .where(price_observation_table.c.observed_at <= window.end)
            .order_by(price_observation_table.c.observed_at)
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyApprovalWorkflowRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ApprovalWorkflow) -> None:
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except IntegrityError as exc:
            raise DuplicatePendingWorkflowError(
                f"Equivalent workflow already pending: {entity.pending_key}"
            ) from exc

    def get(self, workflow_id: UUID) -> ApprovalWorkflow | None:
        return self.session.get(ApprovalWorkflow, workflow_id)

    def pending_since(
        self,
        *,
        entity_type: EntityType,
        change_type: ChangeType,
        since: datetime,
    ) -> list[ApprovalWorkflow]:
        stmt = (
            select(ApprovalWorkflow)
            .where(approval_workflow_table.c.status == WorkflowStatus.PENDING)
            .where(approval_workflow_table.c.entity_type == entity_type)
            .where(approval_workflow_table.c.change_type == change_type)
            .where(approval_workflow_table.c.requested_at >= since)
            .order_by(approval_workflow_table.c.requested_at)
        )
        return list(self.session.scalars(stmt))

    def transition(
        self,
        workflow: ApprovalWorkflow,
        *,
        to: WorkflowStatus,
        reviewer_id: UUID,
        reviewed_at: datetime,
    ) -> bool:
        stmt = (
            update(approval_workflow_table)
            .where(approval_workflow_table.c.id == workflow.id)
            .where(approval_workflow_table.c.status == WorkflowStatus.PENDING)
            .values(
                status=to,
                reviewer_id=reviewer_id,
                reviewed_at=reviewed_at,
                pending_key=None,
            )
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        if result.rowcount != 1:
            return False
        self.session.refresh(workflow)
        return True


class SqlAlchemyAuditLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditLog) -> None:
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except SQLAlchemyError as exc:
            raise AuditWriteError(f"Could not store audit entry {entity.action}") from exc
