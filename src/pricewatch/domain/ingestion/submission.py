"""Application services for ingesting scraped price observations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC
from enum import StrEnum
from typing import TYPE_CHECKING

from pricewatch.domain.authorization import require_role
from pricewatch.domain.errors import DuplicatePendingWorkflowError, NotFoundError, ValidationError
from pricewatch.domain.ingestion.deduplication import (
    DeduplicationGuard,
    DuplicateReason,
    PriceCandidate,
)
from pricewatch.domain.ingestion.resolver import EntityResolver
from pricewatch.domain.model import (
    DEFAULT_SCRAPER_TRUST_SCORE,
    ChangeType,
    EntityType,
    PriceObservation,
    UserRole,
    new_id,
    parse_price,
)
from pricewatch.domain.review.payloads import PriceObservationCreate
from pricewatch.domain.review.workflow_store import WorkflowStore
from pricewatch.domain.time_windows import TimeWindow, parse_iso_datetime, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, tzinfo
    from decimal import Decimal
    from uuid import UUID

    from pricewatch.domain.model import Actor
    from pricewatch.domain.ports import PricewatchUnitOfWork
    from pricewatch.domain.time_windows import Clock

    UnitOfWorkFactory = Callable[[], PricewatchUnitOfWork]

log = logging.getLogger(__name__)


class SubmissionOutcome(StrEnum):
    SUBMITTED = "submitted"
    DUPLICATE_OBSERVATION = "duplicate_observation"
    DUPLICATE_PENDING = "duplicate_pending"
    INVALID_INPUT = "invalid_input"
    INVALID_PRICE = "invalid_price"
    CITY_NOT_FOUND = "city_not_found"
    COMMODITY_NOT_FOUND = "commodity_not_found"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """Outcome of one submission.

    Rejected records are reported here rather than raised so that ingestion
    pipelines can keep going and tell "will never resolve" apart from transient
    failures (which do raise).
    """

    success: bool
    message: str
    outcome: SubmissionOutcome
    workflow_id: UUID | None = None
    skipped: bool = False

    @classmethod
    def failed(cls, outcome: SubmissionOutcome, message: str) -> SubmissionResult:
        return cls(success=False, message=message, outcome=outcome)

    @classmethod
    def skip(cls, outcome: SubmissionOutcome, message: str) -> SubmissionResult:
        return cls(success=True, message=message, outcome=outcome, skipped=True)


@dataclass(frozen=True, slots=True, kw_only=True)
class ScrapedPrice:
    """One collector record after schema validation.

    Field presence is guaranteed; prices, timestamps and names are still
    untrusted text.
    """

    commodity_name: str
    city_name: str
    price_value: str
    price_currency: str
    price_unit: str
    source_name: str
    source_url: str | None = None
    observed_at: str | None = None
    brand: str | None = None
    country: str | None = None
    image_url: str | None = None


def submit_scraped_data(
    record: ScrapedPrice,
    *,
    actor: Actor,
    unit_of_work_factory: UnitOfWorkFactory,
    timezone: tzinfo = UTC,
    scraper_trust_score: int = DEFAULT_SCRAPER_TRUST_SCORE,
    clock: Clock = utcnow,
) -> SubmissionResult:
    """Resolve, deduplicate and queue one scraped observation for review."""

    require_role(actor, UserRole.API_CONSUMER, UserRole.ADMIN, action="submitting scraped data")

    try:
        price = _valid_price(record.price_value)
    except ValidationError as exc:
        return SubmissionResult.failed(SubmissionOutcome.INVALID_PRICE, str(exc))

    try:
        observed_at = parse_iso_datetime(record.observed_at) if record.observed_at else clock()
        # duplicates are bucketed by this day, so it has to exist
        TimeWindow.for_day(observed_at, timezone)
    except ValueError as exc:
        return SubmissionResult.failed(SubmissionOutcome.INVALID_INPUT, str(exc))

    with unit_of_work_factory() as uow:
        resolver = EntityResolver(uow.repositories, scraper_trust_score=scraper_trust_score)

        city = resolver.resolve_city(record.city_name, record.country)
        if city is None:
            return SubmissionResult.failed(
                SubmissionOutcome.CITY_NOT_FOUND, f"City not found: {record.city_name}"
            )
        commodity = resolver.resolve_commodity(record.commodity_name)
        if commodity is None:
            return SubmissionResult.failed(
                SubmissionOutcome.COMMODITY_NOT_FOUND,
                f"Commodity not found: {record.commodity_name}",
            )
        source = resolver.resolve_source(record.source_name, record.source_url)

        candidate = PriceCandidate(
            commodity_id=commodity.id,
            city_id=city.id,
            source_id=source.id,
            price_value=price,
            observed_at=observed_at,
        )
        verdict = DeduplicationGuard(uow.repositories, timezone=timezone).check(candidate)
        if verdict.duplicate:
            # a source registered on the way is still worth keeping
            uow.commit()
            log.debug("Skipped %s (%s)", record.commodity_name, verdict.reason)
            return _skipped(verdict.reason)

        payload = PriceObservationCreate(
            commodity_id=commodity.id,
            city_id=city.id,
            source_id=source.id,
            price_value=price,
            price_currency=record.price_currency,
            price_unit=record.price_unit,
            observed_at=observed_at,
            brand=record.brand,
            image_url=record.image_url,
        )
        store = WorkflowStore(uow.repositories, timezone=timezone, clock=clock)
        try:
            workflow = store.create(
                entity_type=EntityType.PRICE_OBSERVATION,
                entity_id=new_id(),
                change_type=ChangeType.CREATE,
                change_data=payload.to_change_data(),
                requester_id=actor.user_id,
            )
        except DuplicatePendingWorkflowError:
            uow.commit()
            log.debug("Lost pending-workflow race for %s", record.commodity_name)
            return _skipped(DuplicateReason.PENDING_WORKFLOW)
        uow.commit()

    return SubmissionResult(
        success=True,
        message="Data submitted for approval",
        outcome=SubmissionOutcome.SUBMITTED,
        workflow_id=workflow.id,
    )


def record_observation(
    *,
    actor: Actor,
    commodity_id: UUID,
    city_id: UUID,
    source_id: UUID,
    price_value: object,
    price_currency: str,
    price_unit: str,
    unit_of_work_factory: UnitOfWorkFactory,
    observed_at: datetime | None = None,
    is_anomaly: bool = False,
    clock: Clock = utcnow,
) -> PriceObservation:
    """Commit an observation directly, without review. Admins only."""

    require_role(actor, UserRole.ADMIN, action="recording an observation without review")
    observation = PriceObservation(
        commodity_id=commodity_id,
        city_id=city_id,
        source_id=source_id,
        price_value=_valid_price(price_value),
        price_currency=price_currency,
        price_unit=price_unit,
        observed_at=observed_at or clock(),
        is_anomaly=is_anomaly,
    )
    with unit_of_work_factory() as uow:
        if uow.repositories.commodities.get(commodity_id) is None:
            raise NotFoundError(f"Commodity not found: {commodity_id}")
        uow.repositories.observations.add(observation)
        uow.commit()
    log.info("Recorded observation %s without review", observation.id)
    return observation


def _valid_price(value: object) -> Decimal:
    try:
        price = parse_price(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid price: {value}") from exc
    if price < 0:
        raise ValidationError(f"Invalid price: {value}")
    return price


def _skipped(reason: DuplicateReason | None) -> SubmissionResult:
    if reason is DuplicateReason.PENDING_WORKFLOW:
        return SubmissionResult.skip(
            SubmissionOutcome.DUPLICATE_PENDING, "Duplicate pending workflow skipped"
        )
    return SubmissionResult.skip(
        SubmissionOutcome.DUPLICATE_OBSERVATION, "Duplicate observation skipped"
    )
