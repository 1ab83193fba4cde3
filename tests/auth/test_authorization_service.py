"""
Tests for the authorization facade and the service-call decorator.
"""
import pytest

from app.core.config import Settings
from app.core.exceptions import AuthorizationError, QuotaExceededError
from app.domain.schemas.billing import BillingMode, LimitKind
from app.services.auth.authorization import AuthorizationService, log_service_call
from app.services.auth.authorization.gates import OrganizationGate, UserGate

from tests.fixtures.auth import FailingDirectory, StaticActorResolver, Tenants
from tests.fixtures.billing import make_subscription


def make_service(directory, limit_service, actor) -> AuthorizationService:
    return AuthorizationService(
        StaticActorResolver(actor),
        users=UserGate(directory),
        organizations=OrganizationGate(directory, directory, limit_service),
    )


class TestAuthorizationService:
    @pytest.mark.asyncio
    async def test_require_returns_actor(self, directory, limit_service, tenants: Tenants):
        # Arrange
        service = make_service(directory, limit_service, tenants.owner)

        # Act
        actor = await service.require(service.organizations.can_update_organization, tenants.org_id)

        # Assert
        assert actor is tenants.owner

    @pytest.mark.asyncio
    async def test_require_raises_on_refusal(self, directory, limit_service, tenants: Tenants):
        service = make_service(directory, limit_service, tenants.member)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.require(service.organizations.can_update_organization, tenants.org_id)

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {}

    @pytest.mark.asyncio
    async def test_check_uses_current_actor(self, directory, limit_service, tenants: Tenants):
        service = make_service(directory, limit_service, None)

        assert not await service.check(service.users.can_read_user, tenants.private_user.id)
        assert await service.check(service.users.can_read_user, tenants.member.id)

    @pytest.mark.asyncio
    async def test_infrastructure_errors_propagate(self, limit_service, tenants: Tenants):
        service = make_service(FailingDirectory(), limit_service, tenants.owner)

        with pytest.raises(ConnectionError):
            await service.require(service.organizations.can_update_organization, tenants.org_id)


class TestRequireLimit:
    @pytest.mark.asyncio
    async def test_active_organization_is_billed(
        self, limit_service, billing_provider, usage_counter, tenants: Tenants
    ):
        # Arrange
        billing_provider.subscribe(make_subscription(tenants.org_id))
        usage_counter.projects[tenants.org_id] = 4
        service = AuthorizationService(
            StaticActorResolver(tenants.owner, active_organization_id=tenants.org_id),
            limits=limit_service,
        )

        # Act
        result = await service.require_limit(LimitKind.PROJECTS)

        # Assert
        assert limit_service.settings.BILLING_MODE == BillingMode.ORGANIZATION
        assert billing_provider.requested_references == [tenants.org_id]
        assert result.remaining == 16

    @pytest.mark.asyncio
    async def test_exhausted_quota_raises(self, limit_service, usage_counter, tenants: Tenants):
        usage_counter.projects[tenants.org_id] = 3
        service = AuthorizationService(
            StaticActorResolver(tenants.owner, active_organization_id=tenants.org_id),
            limits=limit_service,
        )

        with pytest.raises(QuotaExceededError):
            await service.require_limit("projects")


class TestLogServiceCall:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        @log_service_call("projects", settings=Settings(LOG_SERVICE_ARGUMENTS=True))
        async def rename(project_id, name=None):
            return {"id": project_id, "name": name}

        assert await rename("p1", name="Roadmap") == {"id": "p1", "name": "Roadmap"}
        assert rename.__name__ == "rename"

    @pytest.mark.asyncio
    async def test_reraises_authorization_error(self):
        @log_service_call("projects")
        async def delete(project_id):
            raise AuthorizationError()

        with pytest.raises(AuthorizationError):
            await delete("p1")

    @pytest.mark.asyncio
    async def test_reraises_other_errors(self):
        @log_service_call("projects")
        async def archive(project_id):
            raise ConnectionError("database unavailable")

        with pytest.raises(ConnectionError):
            await archive("p1")
