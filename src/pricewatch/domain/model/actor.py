"""Authenticated caller identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pricewatch.domain.model.enums import UserRole

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class Actor:
    """Who is calling. Resolved by the (external) authentication layer."""

    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
