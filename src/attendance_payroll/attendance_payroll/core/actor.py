from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from .enums import Role

APPROVER_ROLES = frozenset({Role.ADMIN, Role.HR})


@dataclass(frozen=True)
class Actor:
    """Who is calling. Passed explicitly into every service operation."""

    user_id: int
    role: Role
    managed_user_ids: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role in APPROVER_ROLES

    def manages(self, user_id: int) -> bool:
        return int(user_id) in self.managed_user_ids

    def can_approve_for(self, user_id: int) -> bool:
        return self.is_admin or self.manages(user_id)

    def can_view(self, user_id: int) -> bool:
        return int(user_id) == self.user_id or self.can_approve_for(user_id)
