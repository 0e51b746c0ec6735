"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Entity kinds a workflow may target. Values are the wire names used by collectors."""

    COMMODITY = "COMMODITY"
    PRICE_OBSERVATION = "PRICE_OBSERVATION"
    CITY = "CITY"
    SOURCE = "SOURCE"
    BRAND = "BRAND"


class ChangeType(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class WorkflowStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class SourceType(StrEnum):
    GOVERNMENT = "GOVERNMENT"
    MARKET = "MARKET"
    SUPERMARKET = "SUPERMARKET"
    SCRAPER = "SCRAPER"
    API = "API"


class AuditAction(StrEnum):
    CREATE_BRAND = "CREATE_BRAND"
    UPDATE_COMMODITY_BRAND = "UPDATE_COMMODITY_BRAND"
    UPDATE_COMMODITY_IMAGE = "UPDATE_COMMODITY_IMAGE"


class UserRole(StrEnum):
    USER = "USER"
    ADMIN = "ADMIN"
    API_CONSUMER = "API_CONSUMER"
