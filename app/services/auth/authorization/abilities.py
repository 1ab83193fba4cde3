"""
Ability builder: the rule catalog.

Rule sets are a pure function of (actor, organization context). They are
rebuilt on every call and never cached, so permissions computed for one
request or tenant cannot leak into another.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog

from app.domain.schemas.auth import (
    Actor,
    GlobalRole,
    OrganizationContext,
    OrganizationRole,
    Visibility,
)
from app.domain.schemas.resources import PostStatus

from .ability import Ability
from .permissions import Action, Rule, Subject
from .rbac import coerce_role, is_elevated, satisfies_role

logger = structlog.get_logger(__name__)

# Roles that receive the base authenticated catalog.
AUTHENTICATED_ROLES = frozenset({GlobalRole.USER, GlobalRole.REDACTOR, GlobalRole.MODERATOR})

USER_READ_DENIED_FIELDS = ("role", "permissions", "internal_notes")
USER_UPDATE_DENIED_FIELDS = ("role", "permissions", "created_at", "updated_at")


class AbilityBuilder:
    """Append-only accumulator of rules."""

    def __init__(self):
        self._rules: List[Rule] = []

    def can(
        self,
        action: Action,
        subject: Subject,
        conditions: Optional[Dict[str, Any]] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> "AbilityBuilder":
        self._rules.append(self._rule(action, subject, conditions, fields, inverted=False))
        return self

    def cannot(
        self,
        action: Action,
        subject: Subject,
        conditions: Optional[Dict[str, Any]] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> "AbilityBuilder":
        self._rules.append(self._rule(action, subject, conditions, fields, inverted=True))
        return self

    def build(self) -> Ability:
        return Ability(self._rules)

    @staticmethod
    def _rule(
        action: Action,
        subject: Subject,
        conditions: Optional[Dict[str, Any]],
        fields: Optional[Iterable[str]],
        inverted: bool,
    ) -> Rule:
        return Rule(
            action=action,
            subject=subject,
            conditions=dict(conditions) if conditions else None,
            restricted_fields=frozenset(fields) if fields is not None else None,
            inverted=inverted,
        )


def build_guest_abilities(builder: AbilityBuilder) -> None:
    """Unauthenticated visitors: read-only access to public content."""
    builder.can(Action.READ, Subject.LOG, fields=["id", "name"])
    builder.can(Action.READ, Subject.USER, {"visibility": Visibility.PUBLIC.value})
    builder.can(Action.READ, Subject.POST, {"status": PostStatus.PUBLISHED.value})
    builder.can(Action.READ, Subject.CATEGORY)
    builder.can(Action.READ, Subject.HASHTAG)


def build_super_admin_abilities(builder: AbilityBuilder) -> None:
    builder.can(Action.MANAGE, Subject.ALL)


def build_admin_abilities(builder: AbilityBuilder) -> None:
    """
    Explicit admin catalog.

    Redundant with the blanket grant today; kept so that a role placed
    between admin and super admin can receive it without blanket rights.
    """
    for subject in (
        Subject.USER,
        Subject.SUBSCRIPTION,
        Subject.ORGANIZATION,
        Subject.PROJECT,
        Subject.TASK,
        Subject.FILE,
        Subject.TECHNICAL,
        Subject.LOG,
        Subject.NOTIFICATION,
        Subject.POST,
        Subject.CATEGORY,
        Subject.HASHTAG,
    ):
        builder.can(Action.MANAGE, subject)


def build_base_user_abilities(builder: AbilityBuilder, actor: Actor) -> None:
    """Rules shared by every authenticated, non-elevated actor."""
    own = {"id": actor.id}
    owned = {"user_id": actor.id}

    # Users: own profile and public profiles
    builder.can(Action.READ, Subject.USER, own)
    builder.can(Action.UPDATE, Subject.USER, own)
    builder.can(Action.READ, Subject.USER, {"visibility": Visibility.PUBLIC.value})
    builder.cannot(Action.READ, Subject.USER, fields=USER_READ_DENIED_FIELDS)
    builder.cannot(Action.UPDATE, Subject.USER, fields=USER_UPDATE_DENIED_FIELDS)

    # Subscriptions
    builder.can(Action.READ, Subject.SUBSCRIPTION, owned)
    builder.can(Action.UPDATE, Subject.SUBSCRIPTION, owned)
    builder.can(Action.CREATE, Subject.SUBSCRIPTION)

    # Organizations: public info and creation
    builder.can(Action.READ, Subject.ORGANIZATION)
    builder.can(Action.CREATE, Subject.ORGANIZATION)

    # Notifications
    builder.can(Action.READ, Subject.NOTIFICATION, owned)
    builder.can(Action.UPDATE, Subject.NOTIFICATION, owned)
    builder.can(Action.DELETE, Subject.NOTIFICATION, owned)

    builder.can(Action.MANAGE, Subject.FILE, owned)
    builder.can(Action.READ, Subject.LOG)

    # Posts
    builder.can(Action.READ, Subject.POST, {"status": PostStatus.PUBLISHED.value})
    builder.can(Action.CREATE, Subject.POST)
    builder.can(Action.MANAGE, Subject.POST, {"author_id": actor.id})

    builder.can(Action.READ, Subject.CATEGORY)
    builder.can(Action.READ, Subject.HASHTAG)

    builder.cannot(Action.DELETE, Subject.USER)


def build_editorial_abilities(builder: AbilityBuilder, actor: Actor) -> None:
    """Blog rights granted by the redactor and moderator roles."""
    if satisfies_role(actor.role, GlobalRole.REDACTOR):
        builder.can(Action.CREATE, Subject.CATEGORY)
        builder.can(Action.CREATE, Subject.HASHTAG)

    if satisfies_role(actor.role, GlobalRole.MODERATOR):
        builder.can(Action.READ, Subject.POST)
        builder.can(Action.UPDATE, Subject.POST, {"status": PostStatus.PUBLISHED.value})
        builder.can(Action.MANAGE, Subject.CATEGORY)
        builder.can(Action.MANAGE, Subject.HASHTAG)


def build_organizational_abilities(
    builder: AbilityBuilder,
    org_role: OrganizationRole,
    org_context: OrganizationContext,
) -> None:
    """Rules granted by the actor's role in the organization in context."""
    organization = {"id": org_context.organization_id}
    scoped = {"organization_id": org_context.organization_id}

    if org_role == OrganizationRole.OWNER:
        builder.can(Action.MANAGE, Subject.ORGANIZATION, organization)
        builder.can(Action.MANAGE, Subject.USER, scoped)
        builder.can(Action.MANAGE, Subject.SUBSCRIPTION, scoped)
        builder.can(Action.MANAGE, Subject.PROJECT, scoped)
        builder.can(Action.MANAGE, Subject.TASK, scoped)
        builder.can(Action.MANAGE, Subject.FILE, scoped)

    elif org_role == OrganizationRole.ADMIN:
        # No organization deletion
        builder.can(Action.READ, Subject.ORGANIZATION, organization)
        builder.can(Action.UPDATE, Subject.ORGANIZATION, organization)
        builder.can(Action.READ, Subject.USER, scoped)
        builder.can(Action.UPDATE, Subject.USER, scoped)
        builder.can(Action.MANAGE, Subject.SUBSCRIPTION, scoped)
        builder.can(Action.MANAGE, Subject.PROJECT, scoped)
        builder.can(Action.MANAGE, Subject.TASK, scoped)
        builder.can(Action.MANAGE, Subject.FILE, scoped)

    elif org_role == OrganizationRole.MEMBER:
        builder.can(Action.READ, Subject.ORGANIZATION, organization)
        builder.can(Action.READ, Subject.USER, scoped)
        builder.can(Action.READ, Subject.SUBSCRIPTION, scoped)
        builder.can(Action.READ, Subject.PROJECT, scoped)
        builder.can(Action.READ, Subject.TASK, scoped)
        builder.can(Action.CREATE, Subject.TASK, scoped)
        builder.can(Action.UPDATE, Subject.TASK, scoped)
        builder.can(Action.READ, Subject.FILE, scoped)


def build_user_abilities(
    builder: AbilityBuilder,
    actor: Actor,
    org_context: Optional[OrganizationContext] = None,
) -> None:
    build_base_user_abilities(builder, actor)
    build_editorial_abilities(builder, actor)

    if org_context is None:
        return

    membership = actor.membership_in(org_context.organization_id)
    if membership is not None:
        build_organizational_abilities(builder, membership.role, org_context)


def build_abilities(
    actor: Optional[Actor] = None,
    org_context: Optional[OrganizationContext] = None,
) -> Ability:
    """
    Build the rule set for an actor, optionally scoped to an organization.

    Guests and actors without a recognized authenticated role get the guest
    catalog; admins and super admins get the blanket grant plus the admin
    catalog; every other role gets the base catalog, extended with the
    organization block when the actor belongs to the organization in context.
    """
    builder = AbilityBuilder()

    if actor is None:
        build_guest_abilities(builder)
        return builder.build()

    if is_elevated(actor.role):
        build_super_admin_abilities(builder)
        build_admin_abilities(builder)
        return builder.build()

    role = coerce_role(actor.role)
    if role in AUTHENTICATED_ROLES:
        build_user_abilities(builder, actor, org_context)
        return builder.build()

    if role is None and actor.role is not None:
        logger.warning("unrecognized_actor_role", actor_id=actor.id, role=actor.role)

    build_guest_abilities(builder)
    return builder.build()
