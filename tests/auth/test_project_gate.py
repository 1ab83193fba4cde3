"""
Tests for project and task gates, including the projects limit.
"""
import pytest

from app.domain.schemas.resources import ProjectProjection, TaskProjection
from app.services.auth.authorization.gates import ProjectGate

from tests.fixtures.auth import Tenants, new_id
from tests.fixtures.billing import FREE_PLAN, make_subscription


@pytest.fixture
def gate(directory, limit_service) -> ProjectGate:
    return ProjectGate(directory, limit_service)


@pytest.fixture
def project(directory, tenants: Tenants) -> ProjectProjection:
    project = ProjectProjection(id=new_id(), organization_id=tenants.org_id, created_by=tenants.owner.id)
    directory.projects[project.id] = project
    return project


@pytest.fixture
def task(directory, project: ProjectProjection, tenants: Tenants) -> TaskProjection:
    task = TaskProjection(
        id=new_id(),
        organization_id=project.organization_id,
        project_id=project.id,
        created_by=tenants.member.id,
    )
    directory.tasks[task.id] = task
    return task


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_admin_creates_within_limit(self, gate, billing_provider, usage_counter, tenants: Tenants):
        # Arrange
        billing_provider.subscribe(make_subscription(tenants.org_id))
        usage_counter.projects[tenants.org_id] = 19

        # Act & Assert
        assert await gate.can_create_project(tenants.org_admin, tenants.org_id)
        assert not await gate.can_create_project(tenants.org_admin, tenants.org_id, requested_amount=2)

    @pytest.mark.asyncio
    async def test_member_cannot_create(self, gate, billing_provider, tenants: Tenants):
        assert not await gate.can_create_project(tenants.member, tenants.org_id)
        assert billing_provider.requested_references == []

    @pytest.mark.asyncio
    async def test_free_tier_limits_apply_without_subscription(self, gate, usage_counter, tenants: Tenants):
        usage_counter.projects[tenants.org_id] = FREE_PLAN.limits["projects"]

        assert not await gate.can_create_project(tenants.owner, tenants.org_id)

    @pytest.mark.asyncio
    async def test_global_admin_overrides_exhausted_limit(self, gate, usage_counter, tenants: Tenants):
        usage_counter.projects[tenants.org_id] = FREE_PLAN.limits["projects"]

        assert await gate.can_create_project(tenants.global_admin, tenants.org_id)

    @pytest.mark.asyncio
    async def test_outsider_cannot_create_in_foreign_organization(self, gate, tenants: Tenants):
        assert not await gate.can_create_project(tenants.owner, tenants.other_org_id)


class TestProjects:
    @pytest.mark.asyncio
    async def test_read(self, gate, project, tenants: Tenants):
        assert await gate.can_read_project(tenants.member, project.id)
        assert not await gate.can_read_project(tenants.outsider, project.id)
        assert not await gate.can_read_project(None, project.id)

    @pytest.mark.asyncio
    async def test_update_and_delete(self, gate, project, tenants: Tenants):
        assert await gate.can_update_project(tenants.org_admin, project.id)
        assert await gate.can_delete_project(tenants.owner, project.id)
        assert not await gate.can_update_project(tenants.member, project.id)
        assert not await gate.can_delete_project(tenants.cross_tenant, project.id)

    @pytest.mark.asyncio
    async def test_context_comes_from_project(self, gate, directory, tenants: Tenants):
        # A project of the second organization is out of reach of the first one's owner
        foreign = ProjectProjection(id=new_id(), organization_id=tenants.other_org_id)
        directory.projects[foreign.id] = foreign

        assert not await gate.can_update_project(tenants.owner, foreign.id)
        assert await gate.can_update_project(tenants.cross_tenant, foreign.id)

    @pytest.mark.asyncio
    async def test_context_survives_uppercase_stored_ids(self, gate, directory, tenants: Tenants):
        project = ProjectProjection(id=new_id().upper(), organization_id=tenants.org_id.upper())
        directory.projects[project.id] = project

        assert project.organization_id == tenants.org_id
        assert await gate.can_update_project(tenants.owner, project.id.upper())
        assert not await gate.can_update_project(tenants.member, project.id)

    @pytest.mark.asyncio
    async def test_listing_by_organization(self, gate, tenants: Tenants):
        assert await gate.can_read_projects_by_organization(tenants.member, tenants.org_id)
        assert not await gate.can_read_projects_by_organization(tenants.member, tenants.other_org_id)

    @pytest.mark.asyncio
    async def test_missing_project(self, gate, tenants: Tenants):
        assert not await gate.can_read_project(tenants.owner, new_id())
        assert not await gate.can_create_task(tenants.owner, new_id())


class TestTasks:
    @pytest.mark.asyncio
    async def test_member_works_on_tasks(self, gate, project, task, tenants: Tenants):
        assert await gate.can_create_task(tenants.member, project.id)
        assert await gate.can_read_task(tenants.member, task.id)
        assert await gate.can_update_task(tenants.member, task.id)
        assert not await gate.can_delete_task(tenants.member, task.id)
        assert await gate.can_delete_task(tenants.org_admin, task.id)

    @pytest.mark.asyncio
    async def test_outsider(self, gate, project, task, tenants: Tenants):
        assert not await gate.can_read_task(tenants.outsider, task.id)
        assert not await gate.can_create_task(tenants.outsider, project.id)
        assert not await gate.can_read_tasks_by_project(tenants.outsider, project.id)

    @pytest.mark.asyncio
    async def test_tasks_by_project(self, gate, project, tenants: Tenants):
        assert await gate.can_read_tasks_by_project(tenants.member, project.id)
