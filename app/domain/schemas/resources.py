"""
Resource projections returned by the persistence layer.

Each projection carries only the fields referenced by authorization rule
conditions for that entity.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .auth import Visibility, canonical_id


class PostStatus(str, Enum):
    """Publication status of a post."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class EntityType(str, Enum):
    """Entities a stored file can be attached to."""
    USER = "user"
    ORGANIZATION = "organization"
    POST = "post"
    PRODUCT = "product"
    GENERIC = "generic"


class Projection(BaseModel):
    """Base projection, exposes its fields as a condition-matchable mapping."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("*")
    @classmethod
    def canonical_ids(cls, v: Any) -> Any:
        return canonical_id(v)

    def as_resource(self) -> dict:
        return self.model_dump(mode="json")


class UserProjection(Projection):
    id: str
    visibility: Visibility = Visibility.PUBLIC


class OrganizationProjection(Projection):
    id: str


class NotificationProjection(Projection):
    id: str
    user_id: str


class PostProjection(Projection):
    id: str
    status: PostStatus
    author_id: str


class PostTranslationProjection(Projection):
    id: str
    post_id: str


class CategoryProjection(Projection):
    id: str


class HashtagProjection(Projection):
    id: str


class ProjectProjection(Projection):
    id: str
    organization_id: str
    created_by: Optional[str] = None


class TaskProjection(Projection):
    id: str
    organization_id: str
    project_id: str
    created_by: Optional[str] = None
