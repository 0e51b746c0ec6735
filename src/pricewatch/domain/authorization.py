"""Role checks for mutating operations.

Authentication happens outside the domain; callers arrive as an ``Actor``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pricewatch.domain.errors import AuthorizationError

if TYPE_CHECKING:
    from pricewatch.domain.model import Actor, UserRole


def require_role(actor: Actor, *allowed: UserRole, action: str) -> None:
    """Raise ``AuthorizationError`` unless ``actor`` holds one of ``allowed``."""

    if actor.role not in allowed:
        permitted = ", ".join(sorted(allowed))
        raise AuthorizationError(f"Unauthorized: {action} requires one of {permitted}")
