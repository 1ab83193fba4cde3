"""
Subscription limit service.

Computes whether the billing reference of an actor (the actor itself or its
active organization, depending on the billing mode) still has capacity for
a quota-bound operation.
"""

from typing import List, Optional, Union

import structlog

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    BillingReferenceError,
    LimitNotImplementedError,
    QuotaExceededError,
    ValidationError,
)
from app.domain.interfaces.authorization import IBillingProvider, IUsageCounter
from app.domain.schemas.auth import Actor, canonical_id
from app.domain.schemas.billing import (
    LimitCheckResult,
    LimitKind,
    Subscription,
    SubscriptionStatus,
)
from app.services.auth.authorization.authorization import is_user_admin

logger = structlog.get_logger(__name__)

LimitKindLike = Union[LimitKind, str]


def parse_limit_kind(value: LimitKindLike) -> LimitKind:
    if isinstance(value, LimitKind):
        return value
    try:
        return LimitKind(str(value).lower())
    except ValueError:
        raise ValidationError("Invalid limit type", field="limit_kind") from None


def select_subscription(subscriptions: List[Subscription]) -> Subscription:
    """Most recently created subscription wins, ties broken by id."""
    return max(subscriptions, key=lambda s: (s.created_at, s.id))


def effective_limit(
    subscription: Subscription,
    limit_kind: LimitKind,
    per_seat_multiplier: bool = False,
) -> int:
    """
    Seats bound the ``users`` kind; other kinds use the plan limit, optionally
    multiplied by the seat count.
    """
    if limit_kind == LimitKind.USERS:
        return subscription.seats or 0
    if per_seat_multiplier:
        return (subscription.limits.get(limit_kind.value) or 1) * (subscription.seats or 1)
    return subscription.limits.get(limit_kind.value) or 0


class SubscriptionLimitService:
    """
    Entitlement checks backed by the billing provider and domain counters.

    Usage:
        result = await limits.check_limit(actor, LimitKind.PROJECTS, 1, organization_id)
        if not result.allowed:
            raise AuthorizationError()
    """

    def __init__(
        self,
        billing_provider: IBillingProvider,
        usage_counter: IUsageCounter,
        settings: Optional[Settings] = None,
    ):
        self.billing_provider = billing_provider
        self.usage_counter = usage_counter
        self.settings = settings or get_settings()

    def resolve_reference_id(
        self,
        actor: Optional[Actor],
        active_organization_id: Optional[str] = None,
    ) -> str:
        """Billing reference for the configured billing mode."""
        if self.settings.bills_organizations and active_organization_id:
            return canonical_id(active_organization_id)
        if actor is not None and actor.id:
            return actor.id
        raise BillingReferenceError()

    async def get_current_subscription(self, reference_id: str) -> Subscription:
        """
        Active subscription of a reference, or a free-tier placeholder built
        from the free plan when there is none.
        """
        subscriptions = await self.billing_provider.list_active_subscriptions(reference_id)

        if not subscriptions:
            return await self._free_tier_placeholder(reference_id)

        if len(subscriptions) > 1:
            logger.warning(
                "limit_check_multiple_subscriptions",
                reference_id=reference_id,
                count=len(subscriptions),
            )
        return select_subscription(subscriptions)

    async def _free_tier_placeholder(self, reference_id: str) -> Subscription:
        code = self.settings.FREE_PLAN_CODE
        plan = await self.billing_provider.get_plan_by_code(code)
        if plan is None:
            logger.warning("free_plan_missing", plan_code=code, reference_id=reference_id)

        limits = dict(plan.limits) if plan else {}
        logger.info("limit_check_free_tier_fallback", reference_id=reference_id, plan_code=code)
        return Subscription(
            id=code,
            reference_id=reference_id,
            plan=plan.code if plan else code,
            seats=limits.get(LimitKind.USERS.value) or 1,
            limits=limits,
            status=SubscriptionStatus.ACTIVE,
        )

    async def current_usage(self, reference_id: str, limit_kind: LimitKind) -> int:
        if limit_kind == LimitKind.PROJECTS:
            return await self.usage_counter.count_projects(reference_id)
        if limit_kind == LimitKind.USERS:
            return await self.usage_counter.count_members_and_invitations(reference_id)
        if limit_kind == LimitKind.STORAGE:
            raise LimitNotImplementedError(limit_kind.value)
        raise ValidationError("Invalid limit type", field="limit_kind")

    async def check_limit(
        self,
        actor: Optional[Actor],
        limit_kind: LimitKindLike,
        requested_amount: int = 1,
        active_organization_id: Optional[str] = None,
    ) -> LimitCheckResult:
        """
        Check a quota for the actor's billing reference.

        Raises:
            BillingReferenceError: no reference id could be resolved
            LimitNotImplementedError: usage of the kind cannot be counted yet
            ValidationError: unknown limit kind
        """
        kind = parse_limit_kind(limit_kind)
        reference_id = self.resolve_reference_id(actor, active_organization_id)
        subscription = await self.get_current_subscription(reference_id)
        usage = await self.current_usage(reference_id, kind)

        limit = effective_limit(subscription, kind, self.settings.PER_SEAT_MULTIPLIER)
        remaining = max(0, limit - usage)

        if remaining == 0 and is_user_admin(actor):
            override = self.settings.ADMIN_OVERRIDE_LIMIT
            logger.info(
                "limit_check_admin_override",
                reference_id=reference_id,
                limit_kind=kind.value,
                actor_id=actor.id,
            )
            return LimitCheckResult(
                allowed=True,
                limit=override,
                usage=usage,
                remaining=override,
                plan=subscription.plan,
                has_subscription=True,
                limit_kind=kind,
            )

        result = LimitCheckResult(
            allowed=usage + requested_amount <= limit,
            limit=limit,
            usage=usage,
            remaining=remaining,
            plan=subscription.plan,
            has_subscription=True,
            limit_kind=kind,
        )
        logger.debug(
            "limit_checked",
            reference_id=reference_id,
            limit_kind=kind.value,
            allowed=result.allowed,
            limit=limit,
            usage=usage,
        )
        return result

    async def enforce_limit(
        self,
        actor: Optional[Actor],
        limit_kind: LimitKindLike,
        requested_amount: int = 1,
        active_organization_id: Optional[str] = None,
    ) -> LimitCheckResult:
        """Like check_limit, but raise QuotaExceededError when the request does not fit."""
        result = await self.check_limit(actor, limit_kind, requested_amount, active_organization_id)
        if not result.allowed:
            logger.info(
                "limit_exceeded",
                limit_kind=result.limit_kind.value,
                limit=result.limit,
                usage=result.usage,
                requested_amount=requested_amount,
            )
            raise QuotaExceededError(result.limit_kind.value, result.limit, result.usage)
        return result
