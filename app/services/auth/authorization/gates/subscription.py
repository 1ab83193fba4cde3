"""
Subscription and plan gates.
"""

from typing import Any, Dict, Optional, Tuple

from app.core.config import Settings, get_settings
from app.domain.interfaces.authorization import ISubscriptionReader
from app.domain.schemas.auth import Actor, OrganizationContext
from app.domain.schemas.billing import Subscription

from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier, organization_context


class SubscriptionGate(BaseGate):
    """
    Subscriptions are tracked against a billing reference. In user billing
    mode the reference is the owning user; in organization billing mode it is
    the organization, and organization roles apply.
    """

    domain = "subscription"

    def __init__(
        self,
        subscription_reader: ISubscriptionReader,
        settings: Optional[Settings] = None,
    ):
        self.subscription_reader = subscription_reader
        self.settings = settings or get_settings()

    def _resource(
        self, subscription: Subscription
    ) -> Tuple[Dict[str, Any], Optional[OrganizationContext]]:
        if self.settings.bills_organizations:
            return (
                {"id": subscription.id, "organization_id": subscription.reference_id},
                organization_context(subscription.reference_id),
            )
        return {"id": subscription.id, "user_id": subscription.reference_id}, None

    async def _check(
        self, actor: Optional[Actor], action: Action, subscription_id: str
    ) -> bool:
        subscription_id = ensure_identifier(subscription_id, "subscription_id")
        if not self._can(actor, action, Subject.SUBSCRIPTION):
            return self._deny(actor, action.value, subscription_id=subscription_id)

        subscription = await self.subscription_reader.get_subscription_by_id(subscription_id)
        if subscription is None:
            return False

        resource, ctx = self._resource(subscription)
        return self._can_on_resource(actor, action, Subject.SUBSCRIPTION, resource, ctx)

    async def can_read_subscription(
        self, actor: Optional[Actor], subscription_id: Optional[str] = None
    ) -> bool:
        """Without an id, checks whether the actor may read subscriptions at all."""
        if subscription_id is None:
            return self._can(actor, Action.READ, Subject.SUBSCRIPTION)
        return await self._check(actor, Action.READ, subscription_id)

    async def can_update_subscription(self, actor: Optional[Actor], subscription_id: str) -> bool:
        return await self._check(actor, Action.UPDATE, subscription_id)

    # Plans are public catalog entries; changing them is a technical operation.

    async def can_read_plan(
        self, actor: Optional[Actor], plan_id: Optional[str] = None
    ) -> bool:
        return True

    async def can_list_plans(self, actor: Optional[Actor]) -> bool:
        return True

    async def can_create_plan(self, actor: Optional[Actor]) -> bool:
        return self._can(actor, Action.CREATE, Subject.TECHNICAL)

    async def _check_plan(self, actor: Optional[Actor], action: Action, plan_id: str) -> bool:
        plan_id = ensure_identifier(plan_id, "plan_id")
        if not self._can(actor, action, Subject.TECHNICAL):
            return self._deny(actor, f"{action.value}_plan", plan_id=plan_id)

        plan = await self.subscription_reader.get_plan_by_id(plan_id)
        return plan is not None

    async def can_update_plan(self, actor: Optional[Actor], plan_id: str) -> bool:
        return await self._check_plan(actor, Action.UPDATE, plan_id)

    async def can_delete_plan(self, actor: Optional[Actor], plan_id: str) -> bool:
        return await self._check_plan(actor, Action.DELETE, plan_id)
