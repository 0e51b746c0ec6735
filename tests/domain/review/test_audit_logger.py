from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pricewatch.domain.model import AuditAction, EntityType, new_id
from pricewatch.domain.review import AuditLogger
from tests.support.fakes import FakeAuditLogRepository


def test_audit_logger_appends_entries() -> None:
    repository = FakeAuditLogRepository()
    stamp = datetime(2024, 3, 5, 12, tzinfo=UTC)
    logger = AuditLogger(repository, clock=lambda: stamp)
    user_id = new_id()
    brand_id = new_id()

    entry = logger.record(
        user_id, AuditAction.CREATE_BRAND, EntityType.BRAND, brand_id, {"name": "Acme"}
    )

    assert entry is not None
    assert repository.items == [entry]
    assert entry.user_id == user_id
    assert entry.entity_id == brand_id
    assert entry.details == {"name": "Acme"}
    assert entry.created_at == stamp


def test_audit_failure_is_logged_and_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    repository = FakeAuditLogRepository(fail=True)
    logger = AuditLogger(repository)

    with caplog.at_level("ERROR"):
        entry = logger.record(
            new_id(), AuditAction.UPDATE_COMMODITY_IMAGE, EntityType.COMMODITY, new_id()
        )

    assert entry is None
    assert repository.items == []
    assert "Failed to write audit entry" in caplog.text
