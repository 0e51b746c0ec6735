"""Application orchestration entry points.

Each function wires configuration and the SQLAlchemy adapter into one domain
operation. Tests and other callers may pass their own unit-of-work factory.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from pricewatch.adapters.collectors import parse_scraped_record
from pricewatch.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from pricewatch.config import IngestConfig, get_ingest_config
from pricewatch.domain.authorization import require_role
from pricewatch.domain.errors import ValidationError
from pricewatch.domain.ingestion import (
    SubmissionOutcome,
    SubmissionResult,
    record_observation,
    submit_scraped_data,
)
from pricewatch.domain.model import UserRole
from pricewatch.domain.review import approve_workflow, reject_workflow, request_change

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime
    from uuid import UUID

    from pricewatch.domain.model import (
        Actor,
        ApprovalWorkflow,
        ChangeType,
        EntityType,
        PriceObservation,
    )
    from pricewatch.domain.ports import PricewatchUnitOfWork

    UnitOfWorkFactory = Callable[[], PricewatchUnitOfWork]

log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def submit_price(
    data: Mapping[str, Any],
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
) -> SubmissionResult:
    """Queue one scraped price for review using the configured adapters."""

    settings = config or get_ingest_config()
    require_role(actor, UserRole.API_CONSUMER, UserRole.ADMIN, action="submitting scraped data")
    try:
        record = parse_scraped_record(data)
    except ValidationError as exc:
        log.debug("Rejected malformed record: %s", exc)
        return SubmissionResult.failed(SubmissionOutcome.INVALID_INPUT, str(exc))

    result = submit_scraped_data(
        record,
        actor=actor,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        timezone=settings.timezone,
        scraper_trust_score=settings.scraper_trust_score,
    )
    log.info(
        "Submission finished: outcome=%s, skipped=%s, workflow=%s",
        result.outcome,
        result.skipped,
        result.workflow_id,
    )
    return result


def submit_prices(
    records: list[Mapping[str, Any]],
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
) -> list[SubmissionResult]:
    """Submit a batch record by record; one bad record does not stop the rest."""

    settings = config or get_ingest_config()
    factory = _unit_of_work_factory(unit_of_work_factory)
    results = [
        submit_price(record, actor=actor, unit_of_work_factory=factory, config=settings)
        for record in records
    ]
    submitted = sum(1 for result in results if result.success and not result.skipped)
    skipped = sum(1 for result in results if result.skipped)
    log.info(
        f"Finished batch: records={len(results)}, submitted={submitted}, skipped={skipped}, "
        f"failed={len(results) - submitted - skipped}"
    )
    return results


def request_workflow(
    *,
    actor: Actor,
    entity_type: EntityType | str,
    change_type: ChangeType | str,
    change_data: Mapping[str, Any],
    entity_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: IngestConfig | None = None,
) -> ApprovalWorkflow:
    settings = config or get_ingest_config()
    return request_change(
        actor=actor,
        entity_type=entity_type,
        change_type=change_type,
        change_data=change_data,
        entity_id=entity_id,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        timezone=settings.timezone,
    )


def record_price(
    *,
    actor: Actor,
    commodity_id: UUID,
    city_id: UUID,
    source_id: UUID,
    price_value: str,
    price_currency: str,
    price_unit: str,
    observed_at: datetime | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PriceObservation:
    return record_observation(
        actor=actor,
        commodity_id=commodity_id,
        city_id=city_id,
        source_id=source_id,
        price_value=price_value,
        price_currency=price_currency,
        price_unit=price_unit,
        observed_at=observed_at,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def approve(
    workflow_id: UUID,
    *,
    actor: Actor,
    overrides: Mapping[str, Any] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApprovalWorkflow:
    workflow = approve_workflow(
        workflow_id,
        actor=actor,
        overrides=overrides,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )
    log.info(
        "Approved workflow %s (%s %s)", workflow.id, workflow.entity_type, workflow.change_type
    )
    return workflow


def reject(
    workflow_id: UUID,
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApprovalWorkflow:
    workflow = reject_workflow(
        workflow_id,
        actor=actor,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )
    log.info("Rejected workflow %s", workflow.id)
    return workflow
