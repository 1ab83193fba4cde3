"""
Tests for subscription and plan gates in both billing modes.
"""
import pytest

from app.services.auth.authorization.gates import SubscriptionGate

from tests.fixtures.auth import Tenants, new_id
from tests.fixtures.billing import PRO_PLAN, make_subscription


class TestUserBilledSubscriptions:
    @pytest.fixture
    def gate(self, directory, user_billing_settings) -> SubscriptionGate:
        return SubscriptionGate(directory, settings=user_billing_settings)

    @pytest.mark.asyncio
    async def test_owner_reads_and_updates(self, gate, directory, tenants: Tenants):
        # Arrange
        subscription = make_subscription(tenants.member.id)
        directory.subscriptions[subscription.id] = subscription

        # Act & Assert
        assert await gate.can_read_subscription(tenants.member, subscription.id)
        assert await gate.can_update_subscription(tenants.member, subscription.id)
        assert not await gate.can_read_subscription(tenants.outsider, subscription.id)

    @pytest.mark.asyncio
    async def test_guest_is_rejected_before_lookup(self, gate, directory, tenants: Tenants):
        subscription = make_subscription(tenants.member.id)
        directory.subscriptions[subscription.id] = subscription

        assert not await gate.can_read_subscription(None, subscription.id)
        assert directory.calls == 0

    @pytest.mark.asyncio
    async def test_type_level_read(self, gate, tenants: Tenants):
        assert await gate.can_read_subscription(tenants.member)
        assert not await gate.can_read_subscription(None)

    @pytest.mark.asyncio
    async def test_missing_subscription(self, gate, tenants: Tenants):
        assert not await gate.can_read_subscription(tenants.global_admin, new_id())


class TestOrganizationBilledSubscriptions:
    @pytest.fixture
    def gate(self, directory, organization_billing_settings) -> SubscriptionGate:
        return SubscriptionGate(directory, settings=organization_billing_settings)

    @pytest.mark.asyncio
    async def test_organization_roles_apply(self, gate, directory, tenants: Tenants):
        # Arrange
        subscription = make_subscription(tenants.org_id)
        directory.subscriptions[subscription.id] = subscription

        # Act & Assert
        assert await gate.can_read_subscription(tenants.member, subscription.id)
        assert not await gate.can_update_subscription(tenants.member, subscription.id)
        assert await gate.can_update_subscription(tenants.org_admin, subscription.id)
        assert not await gate.can_read_subscription(tenants.outsider, subscription.id)


class TestPlans:
    @pytest.fixture
    def gate(self, directory) -> SubscriptionGate:
        directory.plans[PRO_PLAN.id] = PRO_PLAN
        return SubscriptionGate(directory)

    @pytest.mark.asyncio
    async def test_plans_are_public(self, gate):
        assert await gate.can_read_plan(None, PRO_PLAN.id)
        assert await gate.can_list_plans(None)

    @pytest.mark.asyncio
    async def test_plan_changes_are_technical(self, gate, tenants: Tenants):
        assert await gate.can_create_plan(tenants.global_admin)
        assert await gate.can_update_plan(tenants.super_admin, PRO_PLAN.id)
        assert await gate.can_delete_plan(tenants.global_admin, PRO_PLAN.id)
        assert not await gate.can_create_plan(tenants.owner)
        assert not await gate.can_update_plan(tenants.owner, PRO_PLAN.id)

    @pytest.mark.asyncio
    async def test_missing_plan(self, gate, tenants: Tenants):
        assert not await gate.can_delete_plan(tenants.global_admin, new_id())
