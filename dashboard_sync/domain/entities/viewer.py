"""Domain entity representing the signed-in dashboard user."""

from __future__ import annotations

from dataclasses import dataclass

ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLE_MAINTAINER = "MAINTAINER"
ROLE_ADMIN = "ADMIN"
ROLE_STAFF = "STAFF"

ALL_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_MAINTAINER, ROLE_ADMIN, ROLE_STAFF})
ORGANIZATION_WIDE_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_MAINTAINER})


@dataclass(frozen=True)
class Viewer:
    """Identity, role and branch of the user a session synchronizes for."""

    id: str
    role: str
    branch_id: str | None = None
    branch: str | None = None
    name: str = ""
    email: str = ""

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the viewer's role matches ``role``."""

        return self.role.upper() == role.upper()

    def is_organization_wide(self) -> bool:
        """Return ``True`` when the viewer's role is not restricted to a branch."""

        return self.role.upper() in ORGANIZATION_WIDE_ROLES

    def can_see_branch(self, branch_id: str | None) -> bool:
        """Return ``True`` when events scoped to ``branch_id`` reach the viewer."""

        if not branch_id or self.is_organization_wide():
            return True
        return self.branch_id == branch_id


__all__ = [
    "ALL_ROLES",
    "ORGANIZATION_WIDE_ROLES",
    "ROLE_ADMIN",
    "ROLE_MAINTAINER",
    "ROLE_STAFF",
    "ROLE_SUPER_ADMIN",
    "Viewer",
]
