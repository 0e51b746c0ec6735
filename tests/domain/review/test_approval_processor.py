from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, cast

import pytest

from pricewatch.domain.errors import DuplicateObservationError, NotFoundError
from pricewatch.domain.model import (
    ApprovalWorkflow,
    AuditAction,
    Brand,
    ChangeType,
    Commodity,
    EntityType,
    new_id,
)
from pricewatch.domain.review import (
    ApprovalProcessor,
    AuditLogger,
    BrandCreate,
    CommodityEnrichment,
    PriceObservationCreate,
)
from tests.support.fakes import make_repositories

if TYPE_CHECKING:
    from uuid import UUID

    from pricewatch.domain.model import AuditLog
    from pricewatch.domain.ports import PricewatchRepositories
    from tests.support.fakes import FakeAuditLogRepository

OBSERVED = datetime(2024, 3, 5, 10, tzinfo=UTC)


def _audit_entries(repositories: PricewatchRepositories) -> list[AuditLog]:
    return cast("FakeAuditLogRepository", repositories.audit_logs).items


def _workflow(
    entity_type: EntityType,
    change_type: ChangeType,
    entity_id: UUID | None = None,
) -> ApprovalWorkflow:
    return ApprovalWorkflow(
        entity_type=entity_type,
        entity_id=entity_id or new_id(),
        change_type=change_type,
        requester_id=new_id(),
        requested_at=OBSERVED,
    )


def _payload(commodity: Commodity, **overrides: object) -> PriceObservationCreate:
    values: dict[str, object] = {
        "commodity_id": commodity.id,
        "city_id": new_id(),
        "source_id": new_id(),
        "price_value": Decimal(1200),
        "price_currency": "KES",
        "price_unit": "kg",
        "observed_at": OBSERVED,
    }
    values.update(overrides)
    return PriceObservationCreate(**values)  # type: ignore[arg-type]


def _processor(
    *, failing_audit: bool = False
) -> tuple[PricewatchRepositories, ApprovalProcessor]:
    repositories = make_repositories(failing_audit=failing_audit)
    processor = ApprovalProcessor(repositories, AuditLogger(repositories.audit_logs))
    return repositories, processor


def test_approved_price_creates_brand_links_it_and_commits_observation() -> None:
    repositories, processor = _processor()
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)
    workflow = _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE)
    reviewer = new_id()

    processor.apply(workflow, _payload(commodity, brand="AcmeMaize"), reviewer_id=reviewer)

    brand = repositories.brands.find_by_name("AcmeMaize")
    assert brand is not None
    assert commodity.brand_id == brand.id
    observation = repositories.observations.get(workflow.entity_id)
    assert observation is not None
    assert observation.price_value == Decimal(1200)
    actions = [entry.action for entry in _audit_entries(repositories)]
    assert actions == [AuditAction.CREATE_BRAND, AuditAction.UPDATE_COMMODITY_BRAND]
    assert all(entry.user_id == reviewer for entry in _audit_entries(repositories))


def test_existing_brand_is_reused_without_create_audit() -> None:
    repositories, processor = _processor()
    existing = Brand(name="AcmeMaize")
    repositories.brands.add(existing)
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)

    processor.apply(
        _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE),
        _payload(commodity, brand="AcmeMaize"),
        reviewer_id=new_id(),
    )

    assert commodity.brand_id == existing.id
    actions = [entry.action for entry in _audit_entries(repositories)]
    assert actions == [AuditAction.UPDATE_COMMODITY_BRAND]


def test_curated_brand_and_image_are_never_overwritten() -> None:
    repositories, processor = _processor()
    curated = Brand(name="Curated")
    repositories.brands.add(curated)
    commodity = Commodity(name="Maize", brand_id=curated.id, image_url="https://img/curated")
    repositories.commodities.add(commodity)

    processor.apply(
        _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE),
        _payload(commodity, brand="Scraped", image_url="https://img/scraped"),
        reviewer_id=new_id(),
    )

    assert commodity.brand_id == curated.id
    assert commodity.image_url == "https://img/curated"
    assert repositories.brands.find_by_name("Scraped") is None
    assert _audit_entries(repositories) == []


def test_enrichment_is_idempotent() -> None:
    repositories, processor = _processor()
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)

    for _ in range(2):
        processor.enrich_commodity(
            commodity,
            brand_name="AcmeMaize",
            image_url="https://img/maize",
            reviewer_id=new_id(),
        )

    actions = [entry.action for entry in _audit_entries(repositories)]
    assert actions == [
        AuditAction.CREATE_BRAND,
        AuditAction.UPDATE_COMMODITY_BRAND,
        AuditAction.UPDATE_COMMODITY_IMAGE,
    ]


def test_failed_audit_does_not_block_the_approval() -> None:
    repositories, processor = _processor(failing_audit=True)
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)
    workflow = _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE)

    processor.apply(workflow, _payload(commodity, brand="AcmeMaize"), reviewer_id=new_id())

    assert commodity.brand_id is not None
    assert repositories.observations.get(workflow.entity_id) is not None


def test_missing_commodity_aborts_before_any_write() -> None:
    repositories, processor = _processor()
    ghost = Commodity(name="Ghost")
    workflow = _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE)

    with pytest.raises(NotFoundError, match="Commodity not found"):
        processor.apply(workflow, _payload(ghost, brand="AcmeMaize"), reviewer_id=new_id())

    assert repositories.brands.items == []  # type: ignore[attr-defined]
    assert repositories.observations.get(workflow.entity_id) is None


def test_repeated_observation_id_is_a_conflict() -> None:
    repositories, processor = _processor()
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)
    workflow = _workflow(EntityType.PRICE_OBSERVATION, ChangeType.CREATE)
    processor.apply(workflow, _payload(commodity), reviewer_id=new_id())

    with pytest.raises(DuplicateObservationError):
        processor.apply(workflow, _payload(commodity), reviewer_id=new_id())


def test_commodity_update_enriches_the_target_commodity() -> None:
    repositories, processor = _processor()
    commodity = Commodity(name="Maize")
    repositories.commodities.add(commodity)

    processor.apply(
        _workflow(EntityType.COMMODITY, ChangeType.UPDATE, commodity.id),
        CommodityEnrichment(image_url="https://img/maize"),
        reviewer_id=new_id(),
    )

    assert commodity.image_url == "https://img/maize"
    assert commodity.brand_id is None


def test_brand_create_uses_the_workflow_entity_id() -> None:
    repositories, processor = _processor()
    workflow = _workflow(EntityType.BRAND, ChangeType.CREATE)

    processor.apply(workflow, BrandCreate(name="Acme"), reviewer_id=new_id())

    brand = repositories.brands.find_by_name("Acme")
    assert brand is not None
    assert brand.id == workflow.entity_id
