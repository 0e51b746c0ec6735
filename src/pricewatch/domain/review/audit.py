"""Best-effort audit sink for catalog mutations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pricewatch.domain.errors import AuditWriteError
from pricewatch.domain.model import AuditLog

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime
    from uuid import UUID

    from pricewatch.domain.model import AuditAction, EntityType
    from pricewatch.domain.ports import AuditLogRepository

log = logging.getLogger(__name__)


class AuditLogger:
    """Append audit entries without letting a failed write unwind the caller's work."""

    def __init__(
        self,
        repository: AuditLogRepository,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock

    def record(
        self,
        user_id: UUID,
        action: AuditAction,
        entity: EntityType,
        entity_id: UUID,
        details: Mapping[str, Any] | None = None,
    ) -> AuditLog | None:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=dict(details or {}),
        )
        if self._clock is not None:
            entry.created_at = self._clock()
        try:
            self._repository.add(entry)
        except AuditWriteError:
            log.exception("Failed to write audit entry %s for %s %s", action, entity, entity_id)
            return None
        log.debug("Audit: %s %s %s by %s", action, entity, entity_id, user_id)
        return entry
