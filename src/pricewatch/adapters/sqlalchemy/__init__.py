"""SQLAlchemy adapter package for pricewatch."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyApprovalWorkflowRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyBrandRepository,
    SqlAlchemyCityRepository,
    SqlAlchemyCommodityRepository,
    SqlAlchemyCountryRepository,
    SqlAlchemyPriceObservationRepository,
    SqlAlchemySourceRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    create_database_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyApprovalWorkflowRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyBrandRepository",
    "SqlAlchemyCityRepository",
    "SqlAlchemyCommodityRepository",
    "SqlAlchemyCountryRepository",
    "SqlAlchemyPriceObservationRepository",
    "SqlAlchemySourceRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_database_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
