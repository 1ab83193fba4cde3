"""
Organization gates.

Role semantics inside an organization:
- owner: everything, including deleting the organization and changing roles
- admin: update the organization and manage members, except other admins and owners
- member: read-only access to the organization

Global admins bypass organization roles through the blanket manage grant.
"""

from typing import TYPE_CHECKING, Optional

from app.domain.interfaces.authorization import IMembershipReader, IOrganizationReader
from app.domain.schemas.auth import Actor, OrganizationRole
from app.domain.schemas.billing import LimitCheckResult, LimitKind

from ..authorization import (
    get_user_role_in_organization,
    is_organization_admin,
    is_organization_owner,
    is_user_admin,
)
from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier, organization_context

if TYPE_CHECKING:
    from app.services.billing.limits import SubscriptionLimitService


class OrganizationGate(BaseGate):
    """
    Authorization checks for organizations and their members.

    Usage:
        if not await gate.can_update_organization(actor, organization_id):
            raise AuthorizationError()
    """

    domain = "organization"

    def __init__(
        self,
        organization_reader: IOrganizationReader,
        membership_reader: IMembershipReader,
        limit_service: "SubscriptionLimitService",
    ):
        self.organization_reader = organization_reader
        self.membership_reader = membership_reader
        self.limit_service = limit_service

    def _has_global_manage(self, actor: Optional[Actor]) -> bool:
        return self._can(actor, Action.MANAGE, Subject.ORGANIZATION)

    async def can_read_organization(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        ctx = organization_context(organization_id)

        if not self._can(actor, Action.READ, Subject.ORGANIZATION, ctx):
            return self._deny(actor, "read_organization", organization_id=organization_id)

        organization = await self.organization_reader.get_organization_by_id(organization_id)
        if organization is None:
            return False

        return self._can_on_resource(
            actor, Action.READ, Subject.ORGANIZATION, {"id": organization.id}, ctx
        )

    async def can_create_organization(self, actor: Optional[Actor]) -> bool:
        return self._can(actor, Action.CREATE, Subject.ORGANIZATION)

    async def can_update_organization(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        ctx = organization_context(organization_id)

        if not self._can(actor, Action.UPDATE, Subject.ORGANIZATION, ctx):
            return self._deny(actor, "update_organization", organization_id=organization_id)

        organization = await self.organization_reader.get_organization_by_id(organization_id)
        if organization is None:
            return False

        return self._can_on_resource(
            actor, Action.UPDATE, Subject.ORGANIZATION, {"id": organization.id}, ctx
        )

    async def can_delete_organization(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        """Global manage or organization owner. Organization admins are barred."""
        organization_id = ensure_identifier(organization_id, "organization_id")
        if self._has_global_manage(actor):
            return True
        return is_organization_owner(actor, organization_id)

    async def can_read_organization_member(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        ctx = organization_context(organization_id)

        if not self._can(actor, Action.READ, Subject.USER, ctx):
            return self._deny(actor, "read_member", organization_id=organization_id)

        organization = await self.organization_reader.get_organization_by_id(organization_id)
        if organization is None:
            return False

        return self._can_on_resource(
            actor, Action.READ, Subject.USER, {"organization_id": organization.id}, ctx
        )

    async def can_manage_organization_members(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        if self._has_global_manage(actor):
            return True
        return (
            is_organization_owner(actor, organization_id)
            or is_organization_admin(actor, organization_id)
        )

    async def check_members_limit(
        self,
        actor: Optional[Actor],
        organization_id: str,
        requested_amount: int = 1,
    ) -> LimitCheckResult:
        return await self.limit_service.check_limit(
            actor,
            LimitKind.USERS,
            requested_amount=requested_amount,
            active_organization_id=organization_id,
        )

    async def can_invite_to_organization(
        self,
        actor: Optional[Actor],
        organization_id: str,
        requested_amount: int = 1,
    ) -> bool:
        """Role check first, then the seat limit of the billing reference."""
        if is_user_admin(actor):
            return True

        if not await self.can_manage_organization_members(actor, organization_id):
            return self._deny(actor, "invite", organization_id=organization_id)

        result = await self.check_members_limit(actor, organization_id, requested_amount)
        if not result.allowed:
            return self._deny(
                actor,
                "invite_limit_reached",
                organization_id=organization_id,
                limit=result.limit,
                usage=result.usage,
            )
        return True

    async def can_remove_from_organization(
        self,
        actor: Optional[Actor],
        organization_id: str,
        target_user_id: str,
    ) -> bool:
        """
        Removal rules:
        - global admins may remove anyone
        - anyone may remove themselves
        - owners may remove anyone
        - admins may only remove plain members
        """
        organization_id = ensure_identifier(organization_id, "organization_id")
        target_user_id = ensure_identifier(target_user_id, "target_user_id")

        if self._has_global_manage(actor):
            return True
        if actor is None:
            return False
        if actor.id == target_user_id:
            return True

        role = get_user_role_in_organization(actor, organization_id)
        if role == OrganizationRole.OWNER:
            return True

        if role == OrganizationRole.ADMIN:
            target = await self.membership_reader.get_membership(organization_id, target_user_id)
            if target is None:
                return self._deny(actor, "remove_unknown_member", organization_id=organization_id)
            return target.role == OrganizationRole.MEMBER

        return self._deny(actor, "remove_member", organization_id=organization_id)

    async def can_change_organization_member_role(
        self,
        actor: Optional[Actor],
        organization_id: str,
        target_user_id: str,
    ) -> bool:
        """Only owners change roles, and never their own."""
        organization_id = ensure_identifier(organization_id, "organization_id")
        target_user_id = ensure_identifier(target_user_id, "target_user_id")

        if self._has_global_manage(actor):
            return True
        if actor is None:
            return False
        if actor.id == target_user_id:
            return self._deny(actor, "change_own_role", organization_id=organization_id)
        return is_organization_owner(actor, organization_id)

    async def _scoped(
        self,
        actor: Optional[Actor],
        action: Action,
        subject: Subject,
        organization_id: str,
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        return self._can_on_resource(
            actor,
            action,
            subject,
            {"organization_id": organization_id},
            organization_context(organization_id),
        )

    async def can_read_organization_users(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        return await self._scoped(actor, Action.READ, Subject.USER, organization_id)

    async def can_manage_organization_users(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        return await self._scoped(actor, Action.MANAGE, Subject.USER, organization_id)

    async def can_read_organization_subscriptions(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        return await self._scoped(actor, Action.READ, Subject.SUBSCRIPTION, organization_id)

    async def can_manage_organization_subscriptions(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        return await self._scoped(actor, Action.MANAGE, Subject.SUBSCRIPTION, organization_id)

    async def can_delete_invitation(self, actor: Optional[Actor]) -> bool:
        """Hard deletion of invitation records is reserved to global manage."""
        return self._has_global_manage(actor)
