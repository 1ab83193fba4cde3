"""
Tests for the subscription limit service.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import Settings
from app.core.exceptions import (
    BillingReferenceError,
    LimitNotImplementedError,
    QuotaExceededError,
    ValidationError,
)
from app.domain.schemas.billing import LimitKind
from app.services.billing.limits import SubscriptionLimitService, effective_limit, select_subscription

from tests.fixtures.auth import make_actor, new_id
from tests.fixtures.billing import (
    FREE_PLAN,
    PRO_PLAN,
    InMemoryBillingProvider,
    InMemoryUsageCounter,
    UnavailableBillingProvider,
    make_subscription,
)


@pytest.fixture
def user_limits(billing_provider, usage_counter, user_billing_settings) -> SubscriptionLimitService:
    return SubscriptionLimitService(billing_provider, usage_counter, settings=user_billing_settings)


class TestSeatBoundary:
    """Test the users limit, bounded by purchased seats."""

    @pytest.mark.asyncio
    async def test_full_seats_deny(self, user_limits, billing_provider, usage_counter):
        # Arrange
        actor = make_actor()
        billing_provider.subscribe(make_subscription(actor.id, seats=5))
        usage_counter.members[actor.id] = 5

        # Act
        result = await user_limits.check_limit(actor, LimitKind.USERS, 1)

        # Assert
        assert result.allowed is False
        assert result.remaining == 0
        assert result.limit == 5
        assert result.usage == 5
        assert result.has_subscription is True
        assert result.plan == PRO_PLAN.code

    @pytest.mark.asyncio
    async def test_last_seat_allows(self, user_limits, billing_provider, usage_counter):
        actor = make_actor()
        billing_provider.subscribe(make_subscription(actor.id, seats=5))
        usage_counter.members[actor.id] = 4

        result = await user_limits.check_limit(actor, "users", 1)

        assert result.allowed is True
        assert result.remaining == 1
        assert result.limit_kind == LimitKind.USERS

    @pytest.mark.asyncio
    async def test_seats_not_plan_limit_bound_users(self, user_limits, billing_provider, usage_counter):
        actor = make_actor()
        billing_provider.subscribe(make_subscription(actor.id, seats=2))
        usage_counter.members[actor.id] = 2

        result = await user_limits.check_limit(actor, LimitKind.USERS)

        assert result.limit == 2
        assert not result.allowed


class TestAdminOverride:
    @pytest.mark.asyncio
    async def test_admin_unblocked_at_zero_remaining(self, user_limits, billing_provider, usage_counter):
        # Arrange
        admin = make_actor(role="admin")
        billing_provider.subscribe(make_subscription(admin.id, seats=5))
        usage_counter.members[admin.id] = 5

        # Act
        result = await user_limits.check_limit(admin, LimitKind.USERS, 1)

        # Assert
        assert result.allowed is True
        assert result.limit == 1_000_000
        assert result.remaining == 1_000_000
        assert result.usage == 5

    @pytest.mark.asyncio
    async def test_override_only_at_zero_remaining(self, user_limits, billing_provider, usage_counter):
        admin = make_actor(role="super_admin")
        billing_provider.subscribe(make_subscription(admin.id, seats=5))
        usage_counter.members[admin.id] = 4

        result = await user_limits.check_limit(admin, LimitKind.USERS, 3)

        assert result.allowed is False
        assert result.limit == 5
        assert result.remaining == 1

    @pytest.mark.asyncio
    async def test_override_amount_is_configurable(self, billing_provider, usage_counter):
        service = SubscriptionLimitService(
            billing_provider, usage_counter, settings=Settings(ADMIN_OVERRIDE_LIMIT=500)
        )
        admin = make_actor(role="admin")
        usage_counter.projects[admin.id] = FREE_PLAN.limits["projects"]

        result = await service.check_limit(admin, LimitKind.PROJECTS)

        assert result.limit == 500


class TestFreeTierFallback:
    @pytest.mark.asyncio
    async def test_free_plan_limits_without_subscription(self, user_limits, usage_counter):
        # Arrange
        actor = make_actor()
        usage_counter.projects[actor.id] = 1

        # Act
        result = await user_limits.check_limit(actor, LimitKind.PROJECTS)

        # Assert
        assert result.allowed is True
        assert result.limit == FREE_PLAN.limits["projects"]
        assert result.plan == FREE_PLAN.code
        assert result.remaining == 2

    @pytest.mark.asyncio
    async def test_free_plan_seats_come_from_users_limit(self, user_limits, usage_counter):
        actor = make_actor()
        usage_counter.members[actor.id] = 2

        result = await user_limits.check_limit(actor, LimitKind.USERS)

        assert result.limit == FREE_PLAN.limits["users"]
        assert not result.allowed

    @pytest.mark.asyncio
    async def test_missing_free_plan_still_returns_result(self, usage_counter, user_billing_settings):
        service = SubscriptionLimitService(
            InMemoryBillingProvider(plans=[]), usage_counter, settings=user_billing_settings
        )

        result = await service.check_limit(make_actor(), LimitKind.USERS)

        assert result.limit == 1
        assert result.allowed is True
        assert result.plan == "free"


class TestSubscriptionSelection:
    @pytest.mark.asyncio
    async def test_most_recent_subscription_wins(self, user_limits, billing_provider, usage_counter):
        # Arrange
        actor = make_actor()
        now = datetime.now(timezone.utc)
        billing_provider.subscribe(make_subscription(actor.id, seats=2, created_at=now - timedelta(days=30)))
        billing_provider.subscribe(make_subscription(actor.id, seats=8, created_at=now - timedelta(days=1)))
        billing_provider.subscribe(make_subscription(actor.id, seats=4, created_at=now - timedelta(days=10)))

        # Act
        result = await user_limits.check_limit(actor, LimitKind.USERS)

        # Assert
        assert result.limit == 8

    def test_ties_broken_by_id(self):
        reference_id = new_id()
        created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = make_subscription(reference_id, created_at=created_at, subscription_id="a")
        second = make_subscription(reference_id, created_at=created_at, subscription_id="b")

        assert select_subscription([first, second]).id == "b"
        assert select_subscription([second, first]).id == "b"

    @pytest.mark.asyncio
    async def test_naive_and_aware_timestamps_compare(self, user_limits, billing_provider):
        # Arrange
        actor = make_actor()
        billing_provider.subscribe(make_subscription(actor.id, seats=3, created_at=datetime(2024, 5, 1)))
        billing_provider.subscribe(
            make_subscription(actor.id, seats=7, created_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
        )

        # Act
        result = await user_limits.check_limit(actor, LimitKind.USERS)

        # Assert
        assert result.limit == 3


class TestEffectiveLimit:
    def test_plan_limit_without_multiplier(self):
        subscription = make_subscription(new_id(), seats=4)

        assert effective_limit(subscription, LimitKind.PROJECTS) == PRO_PLAN.limits["projects"]

    def test_per_seat_multiplier(self):
        subscription = make_subscription(new_id(), seats=4)

        assert effective_limit(subscription, LimitKind.PROJECTS, per_seat_multiplier=True) == 80

    def test_missing_plan_limit(self):
        subscription = make_subscription(new_id(), seats=None)
        subscription.limits.clear()

        assert effective_limit(subscription, LimitKind.PROJECTS) == 0
        assert effective_limit(subscription, LimitKind.PROJECTS, per_seat_multiplier=True) == 1
        assert effective_limit(subscription, LimitKind.USERS) == 0


class TestBillingReference:
    @pytest.mark.asyncio
    async def test_organization_mode_uses_active_organization(
        self, limit_service, billing_provider, usage_counter
    ):
        org_id = new_id()
        actor = make_actor()
        usage_counter.projects[org_id] = 2

        result = await limit_service.check_limit(actor, LimitKind.PROJECTS, active_organization_id=org_id)

        assert billing_provider.requested_references == [org_id]
        assert result.usage == 2

    @pytest.mark.asyncio
    async def test_organization_mode_falls_back_to_actor(self, limit_service, billing_provider):
        actor = make_actor()

        await limit_service.check_limit(actor, LimitKind.PROJECTS)

        assert billing_provider.requested_references == [actor.id]

    @pytest.mark.asyncio
    async def test_user_mode_ignores_active_organization(self, user_limits, billing_provider):
        actor = make_actor()

        await user_limits.check_limit(actor, LimitKind.PROJECTS, active_organization_id=new_id())

        assert billing_provider.requested_references == [actor.id]

    @pytest.mark.asyncio
    async def test_no_reference(self, user_limits):
        with pytest.raises(BillingReferenceError):
            await user_limits.check_limit(None, LimitKind.PROJECTS)


class TestFailures:
    @pytest.mark.asyncio
    async def test_storage_is_not_implemented(self, user_limits):
        with pytest.raises(LimitNotImplementedError) as exc_info:
            await user_limits.check_limit(make_actor(), LimitKind.STORAGE)

        assert exc_info.value.status_code == 501

    @pytest.mark.asyncio
    async def test_unknown_limit_kind(self, user_limits):
        with pytest.raises(ValidationError) as exc_info:
            await user_limits.check_limit(make_actor(), "bandwidth")

        assert exc_info.value.message == "Invalid limit type"

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, user_billing_settings):
        service = SubscriptionLimitService(
            UnavailableBillingProvider(), InMemoryUsageCounter(), settings=user_billing_settings
        )

        with pytest.raises(TimeoutError):
            await service.check_limit(make_actor(), LimitKind.PROJECTS)


class TestEnforceLimit:
    @pytest.mark.asyncio
    async def test_returns_result_when_request_fits(self, user_limits, usage_counter):
        actor = make_actor()
        usage_counter.projects[actor.id] = 1

        result = await user_limits.enforce_limit(actor, LimitKind.PROJECTS, 2)

        assert result.allowed is True
        assert result.remaining == 2

    @pytest.mark.asyncio
    async def test_raises_quota_exceeded(self, user_limits, usage_counter):
        # Arrange
        actor = make_actor()
        usage_counter.projects[actor.id] = 2

        # Act
        with pytest.raises(QuotaExceededError) as exc_info:
            await user_limits.enforce_limit(actor, LimitKind.PROJECTS, 2)

        # Assert
        assert exc_info.value.status_code == 402
        assert exc_info.value.details == {"resource": "projects", "limit": 3, "current": 2}

    @pytest.mark.asyncio
    async def test_uppercase_organization_reference(self, limit_service, billing_provider, usage_counter):
        org_id = new_id()
        billing_provider.subscribe(make_subscription(org_id.upper()))
        usage_counter.projects[org_id] = 20

        with pytest.raises(QuotaExceededError):
            await limit_service.enforce_limit(
                make_actor(), LimitKind.PROJECTS, active_organization_id=org_id.upper()
            )

        assert billing_provider.requested_references == [org_id]
