"""
Subscription, plan and limit check schemas.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .auth import canonical_id


class BillingMode(str, Enum):
    """What a subscription's reference id points to."""
    USER = "user"
    ORGANIZATION = "organization"


class LimitKind(str, Enum):
    """Resources whose usage is bounded by a subscription."""
    PROJECTS = "projects"
    STORAGE = "storage"
    USERS = "users"


class SubscriptionStatus(str, Enum):
    INCOMPLETE = "incomplete"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class Plan(BaseModel):
    """Subscription plan template."""
    id: Optional[str] = None
    code: str
    name: Optional[str] = None
    limits: Dict[str, int] = Field(default_factory=dict)


class Subscription(BaseModel):
    """Subscription tracked against a billing reference (user or organization)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    reference_id: str
    plan: str
    seats: Optional[int] = None
    limits: Dict[str, int] = Field(default_factory=dict)
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("reference_id")
    @classmethod
    def canonical_reference_id(cls, v: str) -> str:
        return canonical_id(v)

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, v: datetime) -> datetime:
        # Naive timestamps from the provider are taken as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class LimitCheckResult(BaseModel):
    """Outcome of an entitlement check."""
    allowed: bool
    limit: int
    usage: int
    remaining: int
    plan: str
    has_subscription: bool
    limit_kind: LimitKind
