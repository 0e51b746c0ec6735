"""Side effects of approving a workflow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from pricewatch.domain.errors import NotFoundError
from pricewatch.domain.model import (
    AuditAction,
    Brand,
    Commodity,
    EntityType,
    PriceObservation,
)
from pricewatch.domain.review.payloads import (
    BrandCreate,
    CommodityEnrichment,
    PriceObservationCreate,
)

if TYPE_CHECKING:
    from uuid import UUID

    from pricewatch.domain.model import ApprovalWorkflow
    from pricewatch.domain.ports import PricewatchRepositories
    from pricewatch.domain.review.audit import AuditLogger
    from pricewatch.domain.review.payloads import ChangePayload

log = logging.getLogger(__name__)


class ApprovalProcessor:
    """Apply an approved change: deferred enrichments first, then the change itself.

    Every enrichment is fill-if-empty. Running the processor again for the same
    commodity never overwrites a curated brand or image and never writes a
    second audit entry for a field that is already set.
    """

    def __init__(self, repositories: PricewatchRepositories, audit: AuditLogger) -> None:
        self._repositories = repositories
        self._audit = audit

    def apply(
        self,
        workflow: ApprovalWorkflow,
        payload: ChangePayload,
        *,
        reviewer_id: UUID,
    ) -> None:
        match payload:
            case PriceObservationCreate():
                self._create_observation(workflow, payload, reviewer_id=reviewer_id)
            case CommodityEnrichment():
                commodity = self._commodity(workflow.entity_id)
                self.enrich_commodity(
                    commodity,
                    brand_name=payload.brand,
                    image_url=payload.image_url,
                    reviewer_id=reviewer_id,
                )
            case BrandCreate():
                self._resolve_brand(
                    payload.name,
                    reviewer_id=reviewer_id,
                    brand_id=workflow.entity_id,
                )
            case _:
                assert_never(payload)

    def enrich_commodity(
        self,
        commodity: Commodity,
        *,
        brand_name: str | None,
        image_url: str | None,
        reviewer_id: UUID,
    ) -> None:
        if brand_name and commodity.brand_id is None:
            brand = self._resolve_brand(brand_name, reviewer_id=reviewer_id)
            if commodity.assign_brand(brand):
                self._audit.record(
                    reviewer_id,
                    AuditAction.UPDATE_COMMODITY_BRAND,
                    EntityType.COMMODITY,
                    commodity.id,
                    {"brandId": str(brand.id), "brandName": brand.name},
                )
                log.info("Assigned brand %r to commodity %s", brand.name, commodity.id)

        if image_url and commodity.backfill_image(image_url):
            self._audit.record(
                reviewer_id,
                AuditAction.UPDATE_COMMODITY_IMAGE,
                EntityType.COMMODITY,
                commodity.id,
                {"imageUrl": image_url},
            )
            log.info("Backfilled image for commodity %s", commodity.id)

    def _create_observation(
        self,
        workflow: ApprovalWorkflow,
        payload: PriceObservationCreate,
        *,
        reviewer_id: UUID,
    ) -> None:
        commodity = self._commodity(payload.commodity_id)
        self.enrich_commodity(
            commodity,
            brand_name=payload.brand,
            image_url=payload.image_url,
            reviewer_id=reviewer_id,
        )
        observation = PriceObservation(
            id=workflow.entity_id,
            commodity_id=payload.commodity_id,
            city_id=payload.city_id,
            source_id=payload.source_id,
            price_value=payload.price_value,
            price_currency=payload.price_currency,
            price_unit=payload.price_unit,
            observed_at=payload.observed_at,
            is_anomaly=payload.is_anomaly,
        )
        self._repositories.observations.add(observation)
        log.info("Committed price observation %s", observation.id)

    def _resolve_brand(
        self,
        name: str,
        *,
        reviewer_id: UUID,
        brand_id: UUID | None = None,
    ) -> Brand:
        candidate = Brand(name=name) if brand_id is None else Brand(id=brand_id, name=name)
        brand, created = self._repositories.brands.get_or_create(candidate)
        if created:
            self._audit.record(
                reviewer_id,
                AuditAction.CREATE_BRAND,
                EntityType.BRAND,
                brand.id,
                {"name": brand.name},
            )
            log.info("Created brand %r", brand.name)
        return brand

    def _commodity(self, commodity_id: UUID) -> Commodity:
        commodity = self._repositories.commodities.get(commodity_id)
        if commodity is None:
            raise NotFoundError(f"Commodity not found: {commodity_id}")
        return commodity
