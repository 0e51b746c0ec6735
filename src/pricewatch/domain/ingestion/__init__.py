"""Turning scraped records into reviewable workflows."""

from pricewatch.domain.ingestion.deduplication import (
    DeduplicationGuard,
    DuplicateCheck,
    DuplicateReason,
    PriceCandidate,
)
from pricewatch.domain.ingestion.resolver import EntityResolver, sanitize_name
from pricewatch.domain.ingestion.submission import (
    ScrapedPrice,
    SubmissionOutcome,
    SubmissionResult,
    record_observation,
    submit_scraped_data,
)

__all__ = [
    "DeduplicationGuard",
    "DuplicateCheck",
    "DuplicateReason",
    "EntityResolver",
    "PriceCandidate",
    "ScrapedPrice",
    "SubmissionOutcome",
    "SubmissionResult",
    "record_observation",
    "sanitize_name",
    "submit_scraped_data",
]
