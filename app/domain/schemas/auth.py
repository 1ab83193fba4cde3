"""
Actor and organization context schemas used by the authorization engine.
"""
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def canonical_id(value: Any) -> Any:
    """
    Lowercase hyphenated form of a UUID string; other values are returned as is.

    Every id compared by the engine goes through this so that ids stored in
    another valid UUID spelling still match.
    """
    if not isinstance(value, str):
        return value
    try:
        return str(UUID(value))
    except ValueError:
        return value


class GlobalRole(str, Enum):
    """Global roles, declared from weakest to strongest."""
    PUBLIC = "public"
    USER = "user"
    REDACTOR = "redactor"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class OrganizationRole(str, Enum):
    """Roles an actor can hold inside one organization."""
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"


class Visibility(str, Enum):
    """Profile visibility."""
    PUBLIC = "public"
    PRIVATE = "private"


class OrganizationMembership(BaseModel):
    """Membership row linking an actor to an organization."""
    model_config = ConfigDict(frozen=True)

    organization_id: str
    role: OrganizationRole

    @field_validator("organization_id")
    @classmethod
    def canonical_organization_id(cls, v: str) -> str:
        return canonical_id(v)


class Actor(BaseModel):
    """
    Authenticated user performing an operation.

    Guests are represented by the absence of an actor (``None``), never by an
    Actor instance. ``role`` stays a raw string so that unknown roles coming
    from storage degrade to ``public`` instead of failing validation.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    role: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC
    organizations: List[OrganizationMembership] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def canonical_actor_id(cls, v: str) -> str:
        return canonical_id(v)

    @field_validator("organizations")
    @classmethod
    def unique_memberships(
        cls, v: List[OrganizationMembership]
    ) -> List[OrganizationMembership]:
        seen = set()
        for membership in v:
            if membership.organization_id in seen:
                raise ValueError(
                    f"duplicate membership for organization {membership.organization_id}"
                )
            seen.add(membership.organization_id)
        return v

    def membership_in(self, organization_id: str) -> Optional[OrganizationMembership]:
        """Return the membership row for an organization, if any."""
        organization_id = canonical_id(organization_id)
        for membership in self.organizations:
            if membership.organization_id == organization_id:
                return membership
        return None


class OrganizationContext(BaseModel):
    """Organization the actor is currently acting within."""
    model_config = ConfigDict(frozen=True)

    organization_id: str

    @field_validator("organization_id")
    @classmethod
    def canonical_organization_id(cls, v: str) -> str:
        return canonical_id(v)
