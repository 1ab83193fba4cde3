"""
Domain schemas for the Tenantry authorization engine.
"""

from .auth import *
from .billing import *
from .resources import *

__all__ = [
    # Auth schemas
    "GlobalRole",
    "OrganizationRole",
    "Visibility",
    "OrganizationMembership",
    "Actor",
    "OrganizationContext",

    # Billing schemas
    "BillingMode",
    "LimitKind",
    "SubscriptionStatus",
    "Plan",
    "Subscription",
    "LimitCheckResult",

    # Resource projections
    "PostStatus",
    "EntityType",
    "Projection",
    "UserProjection",
    "OrganizationProjection",
    "NotificationProjection",
    "PostProjection",
    "PostTranslationProjection",
    "CategoryProjection",
    "HashtagProjection",
    "ProjectProjection",
    "TaskProjection",
]
