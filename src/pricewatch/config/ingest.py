"""Ingestion and review defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pricewatch.domain.model import DEFAULT_SCRAPER_TRUST_SCORE

from .env import int_env_var, optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class IngestConfig:
    """Settings shared by submission and review.

    ``timezone`` decides which calendar day an observation belongs to when
    looking for duplicates.
    """

    timezone: tzinfo = field(default=UTC)
    scraper_trust_score: int = DEFAULT_SCRAPER_TRUST_SCORE


def parse_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name}") from exc


def get_ingest_config() -> IngestConfig:
    tz_name = optional_env_var("PRICEWATCH_TIMEZONE")
    return IngestConfig(
        timezone=parse_timezone(tz_name) if tz_name else UTC,
        scraper_trust_score=int_env_var(
            "PRICEWATCH_SCRAPER_TRUST_SCORE",
            default=DEFAULT_SCRAPER_TRUST_SCORE,
            minimum=0,
            maximum=100,
        ),
    )
