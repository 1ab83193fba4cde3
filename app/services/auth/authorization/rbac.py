"""
Role model for Tenantry.

Global roles form a single ordered hierarchy; organization roles are plain
labels whose dominance is encoded per resource type by the ability builder.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union

import structlog

from app.domain.schemas.auth import GlobalRole, OrganizationRole

logger = structlog.get_logger(__name__)

RoleLike = Union[GlobalRole, str, None]

ELEVATED_ROLES = frozenset({GlobalRole.ADMIN, GlobalRole.SUPER_ADMIN})


def coerce_role(role: RoleLike) -> Optional[GlobalRole]:
    """Map a raw role value onto GlobalRole, None when unrecognized."""
    if role is None:
        return None
    if isinstance(role, GlobalRole):
        return role
    try:
        return GlobalRole(str(role).lower())
    except ValueError:
        return None


def normalize_role(role: RoleLike) -> GlobalRole:
    """Absent or unknown roles are treated as the weakest level."""
    return coerce_role(role) or GlobalRole.PUBLIC


def is_elevated(role: RoleLike) -> bool:
    """Check if a role carries global administrative rights."""
    return normalize_role(role) in ELEVATED_ROLES


class RoleHierarchy:
    """Ordered global role hierarchy (weakest first)."""

    def __init__(self, ordered_roles: Sequence[GlobalRole]):
        if len(set(ordered_roles)) != len(ordered_roles):
            raise ValueError("Role hierarchy contains duplicates")
        self._roles: List[GlobalRole] = list(ordered_roles)

    @property
    def roles(self) -> List[GlobalRole]:
        return list(self._roles)

    def level(self, role: RoleLike) -> int:
        """Hierarchy index of a role; unknown roles sit at the public level."""
        return self._roles.index(normalize_role(role))

    def satisfies(self, actor_role: RoleLike, required_role: RoleLike) -> bool:
        """
        Check if actor_role is at least as strong as required_role.

        An unrecognized required role fails closed.
        """
        required = coerce_role(required_role)
        if required is None:
            logger.warning("unknown_required_role", required_role=str(required_role))
            return False
        return self.level(actor_role) >= self._roles.index(required)

    def satisfies_any(self, actor_role: RoleLike, required_roles: Iterable[RoleLike]) -> bool:
        """Check if actor_role satisfies at least one of required_roles."""
        return any(self.satisfies(actor_role, required) for required in required_roles)


# Global role hierarchy instance
role_hierarchy = RoleHierarchy(list(GlobalRole))


def satisfies_role(actor_role: RoleLike, required_role: RoleLike) -> bool:
    return role_hierarchy.satisfies(actor_role, required_role)


def satisfies_any_role(actor_role: RoleLike, required_roles: Iterable[RoleLike]) -> bool:
    return role_hierarchy.satisfies_any(actor_role, required_roles)


def parse_organization_role(value: Union[OrganizationRole, str, None]) -> Optional[OrganizationRole]:
    """Parse an organization role label, None when unrecognized."""
    if value is None or isinstance(value, OrganizationRole):
        return value
    try:
        return OrganizationRole(str(value).lower())
    except ValueError:
        return None
