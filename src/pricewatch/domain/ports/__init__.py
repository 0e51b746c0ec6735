"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ApprovalWorkflowRepository,
    AuditLogRepository,
    BrandRepository,
    CityRepository,
    CommodityRepository,
    CountryRepository,
    PriceObservationRepository,
    Repository,
    SourceRepository,
)
from .unit_of_work import (
    PricewatchRepositories,
    PricewatchUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ApprovalWorkflowRepository",
    "AuditLogRepository",
    "BrandRepository",
    "CityRepository",
    "CommodityRepository",
    "CountryRepository",
    "PriceObservationRepository",
    "PricewatchRepositories",
    "PricewatchUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "SourceRepository",
    "UnitOfWork",
]
