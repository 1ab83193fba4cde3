"""
Authorization engine for Tenantry.

This module provides the global role model, the declarative rule catalog
(abilities), the rule evaluator and the per-domain gates that combine them
with resource lookups and subscription limits.
"""

from .abilities import AbilityBuilder, build_abilities
from .ability import Ability
from .authorization import (
    AuthorizationService,
    filter_fields,
    get_user_role_in_organization,
    has_organization_role,
    is_organization_admin,
    is_organization_owner,
    is_user_admin,
    user_can,
    user_can_on_resource,
    user_cannot,
)
from .decorators import log_service_call
from .gates import (
    AdminDashboardGate,
    FileGate,
    NotificationGate,
    OrganizationGate,
    PostGate,
    ProjectGate,
    SubscriptionGate,
    UserGate,
)
from .permissions import Action, Rule, Subject
from .rbac import RoleHierarchy, role_hierarchy, satisfies_role

__all__ = [
    # Core services
    "AuthorizationService",
    "AbilityBuilder",
    "build_abilities",

    # Models
    "Ability",
    "Action",
    "Rule",
    "Subject",
    "RoleHierarchy",
    "role_hierarchy",

    # Evaluation helpers
    "user_can",
    "user_cannot",
    "user_can_on_resource",
    "filter_fields",
    "is_user_admin",
    "get_user_role_in_organization",
    "has_organization_role",
    "is_organization_owner",
    "is_organization_admin",
    "satisfies_role",

    # Gates
    "AdminDashboardGate",
    "FileGate",
    "NotificationGate",
    "OrganizationGate",
    "PostGate",
    "ProjectGate",
    "SubscriptionGate",
    "UserGate",

    # Decorators
    "log_service_call",
]
