"""
Authorization entry points for Tenantry.

Stateless helpers that build a fresh ability for each check, and the
AuthorizationService that composes the per-domain gates with actor
resolution and turns refusals into AuthorizationError.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping, Optional

import structlog

from app.core.exceptions import AuthorizationError
from app.core.logging import log_authorization_decision
from app.domain.interfaces.authorization import IActorResolver
from app.domain.schemas.auth import Actor, OrganizationContext, OrganizationRole

from .abilities import build_abilities
from .ability import ActionLike, SubjectLike
from .rbac import is_elevated

if TYPE_CHECKING:
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
    from app.domain.schemas.billing import LimitCheckResult
    from app.services.billing.limits import LimitKindLike, SubscriptionLimitService

logger = structlog.get_logger(__name__)


def _actor_id(actor: Optional[Actor]) -> Optional[str]:
    return actor.id if actor else None


def user_can(
    actor: Optional[Actor],
    action: ActionLike,
    subject: SubjectLike,
    org_context: Optional[OrganizationContext] = None,
) -> bool:
    """Check if the actor may perform action on the subject type at all."""
    return build_abilities(actor, org_context).can(action, subject)


def user_cannot(
    actor: Optional[Actor],
    action: ActionLike,
    subject: SubjectLike,
    org_context: Optional[OrganizationContext] = None,
) -> bool:
    return build_abilities(actor, org_context).cannot(action, subject)


def user_can_on_resource(
    actor: Optional[Actor],
    action: ActionLike,
    subject: SubjectLike,
    resource: Any,
    org_context: Optional[OrganizationContext] = None,
) -> bool:
    """Check if the actor may perform action on a concrete (partial) resource."""
    allowed = build_abilities(actor, org_context).can_on_resource(action, subject, resource)
    logger.debug(
        "resource_permission_checked",
        **log_authorization_decision(
            str(getattr(action, "value", action)),
            str(getattr(subject, "value", subject)),
            allowed,
            actor_id=_actor_id(actor),
            organization_id=org_context.organization_id if org_context else None,
        ),
    )
    return allowed


def filter_fields(
    actor: Optional[Actor],
    action: ActionLike,
    subject: SubjectLike,
    data: Mapping[str, Any],
    org_context: Optional[OrganizationContext] = None,
) -> Dict[str, Any]:
    """Strip the keys of data the actor may not act on."""
    return build_abilities(actor, org_context).filter_fields(action, subject, data)


def is_user_admin(actor: Optional[Actor]) -> bool:
    """Check if the actor holds a global administrative role."""
    if actor is None:
        return False
    return is_elevated(actor.role)


def get_user_role_in_organization(
    actor: Optional[Actor],
    organization_id: str,
) -> Optional[OrganizationRole]:
    if actor is None:
        return None
    membership = actor.membership_in(organization_id)
    return membership.role if membership else None


def has_organization_role(
    actor: Optional[Actor],
    organization_id: str,
    role: OrganizationRole,
) -> bool:
    return get_user_role_in_organization(actor, organization_id) == role


def is_organization_owner(actor: Optional[Actor], organization_id: str) -> bool:
    return has_organization_role(actor, organization_id, OrganizationRole.OWNER)


def is_organization_admin(actor: Optional[Actor], organization_id: str) -> bool:
    return has_organization_role(actor, organization_id, OrganizationRole.ADMIN)


GateCheck = Callable[..., Awaitable[bool]]


class AuthorizationService:
    """
    Request-facing authorization facade.

    Holds the per-domain gates, resolves the current actor through the
    injected resolver on every call and raises AuthorizationError when a
    gate refuses.

    Usage:
        await authorization.require(
            authorization.organizations.can_update_organization, organization_id
        )
    """

    def __init__(
        self,
        actor_resolver: IActorResolver,
        users: Optional["UserGate"] = None,
        organizations: Optional["OrganizationGate"] = None,
        notifications: Optional["NotificationGate"] = None,
        files: Optional["FileGate"] = None,
        subscriptions: Optional["SubscriptionGate"] = None,
        posts: Optional["PostGate"] = None,
        projects: Optional["ProjectGate"] = None,
        admin_dashboard: Optional["AdminDashboardGate"] = None,
        limits: Optional["SubscriptionLimitService"] = None,
    ):
        self.actor_resolver = actor_resolver
        self.users = users
        self.organizations = organizations
        self.notifications = notifications
        self.files = files
        self.subscriptions = subscriptions
        self.posts = posts
        self.projects = projects
        self.admin_dashboard = admin_dashboard
        self.limits = limits

    async def current_actor(self) -> Optional[Actor]:
        return await self.actor_resolver.get_current_actor()

    async def check(self, gate: GateCheck, *args: Any, **kwargs: Any) -> bool:
        """Run a gate for the current actor and return its decision."""
        actor = await self.current_actor()
        return await gate(actor, *args, **kwargs)

    async def require(self, gate: GateCheck, *args: Any, **kwargs: Any) -> Optional[Actor]:
        """
        Run a gate for the current actor, raising AuthorizationError on refusal.

        Returns the resolved actor so the caller can proceed with it.
        Infrastructure errors raised by the gate propagate unchanged.
        """
        actor = await self.current_actor()
        granted = await gate(actor, *args, **kwargs)
        if not granted:
            logger.info(
                "authorization_denied",
                gate=getattr(gate, "__qualname__", repr(gate)),
                actor_id=_actor_id(actor),
            )
            raise AuthorizationError()
        return actor

    async def require_limit(
        self,
        limit_kind: "LimitKindLike",
        requested_amount: int = 1,
    ) -> "LimitCheckResult":
        """
        Enforce a quota for the current actor.

        The billing reference is the resolver's active organization when the
        deployment bills organizations, otherwise the actor.

        Raises:
            QuotaExceededError: the request does not fit in the remaining quota
        """
        if self.limits is None:
            raise RuntimeError("AuthorizationService was built without a limit service")
        actor = await self.current_actor()
        organization_id = await self.actor_resolver.get_active_organization_id()
        return await self.limits.enforce_limit(
            actor, limit_kind, requested_amount, active_organization_id=organization_id
        )
