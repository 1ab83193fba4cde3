"""
Project and task gates.

Projects and tasks belong to an organization; the organization context is
always taken from the loaded resource, never from the caller.
"""

from typing import TYPE_CHECKING, Optional

from app.domain.interfaces.authorization import IProjectReader
from app.domain.schemas.auth import Actor
from app.domain.schemas.billing import LimitCheckResult, LimitKind
from app.domain.schemas.resources import ProjectProjection, TaskProjection

from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier, organization_context

if TYPE_CHECKING:
    from app.services.billing.limits import SubscriptionLimitService


class ProjectGate(BaseGate):
    domain = "project"

    def __init__(
        self,
        project_reader: IProjectReader,
        limit_service: "SubscriptionLimitService",
    ):
        self.project_reader = project_reader
        self.limit_service = limit_service

    async def check_project_creation_limit(
        self,
        actor: Optional[Actor],
        organization_id: str,
        requested_amount: int = 1,
    ) -> LimitCheckResult:
        return await self.limit_service.check_limit(
            actor,
            LimitKind.PROJECTS,
            requested_amount=requested_amount,
            active_organization_id=organization_id,
        )

    async def can_create_project(
        self,
        actor: Optional[Actor],
        organization_id: str,
        requested_amount: int = 1,
    ) -> bool:
        """Permission in the organization first, then the projects limit."""
        organization_id = ensure_identifier(organization_id, "organization_id")
        allowed = self._can_on_resource(
            actor,
            Action.CREATE,
            Subject.PROJECT,
            {"organization_id": organization_id},
            organization_context(organization_id),
        )
        if not allowed:
            return False

        result = await self.check_project_creation_limit(actor, organization_id, requested_amount)
        if not result.allowed:
            return self._deny(
                actor,
                "project_limit_reached",
                organization_id=organization_id,
                limit=result.limit,
                usage=result.usage,
            )
        return True

    def _can_on_project(
        self, actor: Optional[Actor], action: Action, project: ProjectProjection
    ) -> bool:
        return self._can_on_resource(
            actor,
            action,
            Subject.PROJECT,
            {
                "id": project.id,
                "organization_id": project.organization_id,
                "created_by": project.created_by,
            },
            organization_context(project.organization_id),
        )

    async def _load_project(self, project_id: str) -> Optional[ProjectProjection]:
        return await self.project_reader.get_project_by_id(
            ensure_identifier(project_id, "project_id")
        )

    async def _check_project(self, actor: Optional[Actor], action: Action, project_id: str) -> bool:
        project = await self._load_project(project_id)
        if project is None:
            return False
        return self._can_on_project(actor, action, project)

    async def can_read_project(self, actor: Optional[Actor], project_id: str) -> bool:
        return await self._check_project(actor, Action.READ, project_id)

    async def can_update_project(self, actor: Optional[Actor], project_id: str) -> bool:
        return await self._check_project(actor, Action.UPDATE, project_id)

    async def can_delete_project(self, actor: Optional[Actor], project_id: str) -> bool:
        return await self._check_project(actor, Action.DELETE, project_id)

    async def _can_on_project_tasks(
        self, actor: Optional[Actor], action: Action, project_id: str
    ) -> bool:
        project = await self._load_project(project_id)
        if project is None:
            return False
        return self._can_on_resource(
            actor,
            action,
            Subject.TASK,
            {"organization_id": project.organization_id, "project_id": project.id},
            organization_context(project.organization_id),
        )

    async def can_create_task(self, actor: Optional[Actor], project_id: str) -> bool:
        return await self._can_on_project_tasks(actor, Action.CREATE, project_id)

    async def _check_task(self, actor: Optional[Actor], action: Action, task_id: str) -> bool:
        task: Optional[TaskProjection] = await self.project_reader.get_task_by_id(
            ensure_identifier(task_id, "task_id")
        )
        if task is None:
            return False
        return self._can_on_resource(
            actor,
            action,
            Subject.TASK,
            {
                "id": task.id,
                "organization_id": task.organization_id,
                "project_id": task.project_id,
                "created_by": task.created_by,
            },
            organization_context(task.organization_id),
        )

    async def can_read_task(self, actor: Optional[Actor], task_id: str) -> bool:
        return await self._check_task(actor, Action.READ, task_id)

    async def can_update_task(self, actor: Optional[Actor], task_id: str) -> bool:
        return await self._check_task(actor, Action.UPDATE, task_id)

    async def can_delete_task(self, actor: Optional[Actor], task_id: str) -> bool:
        return await self._check_task(actor, Action.DELETE, task_id)

    async def can_read_projects_by_organization(
        self, actor: Optional[Actor], organization_id: str
    ) -> bool:
        organization_id = ensure_identifier(organization_id, "organization_id")
        return self._can_on_resource(
            actor,
            Action.READ,
            Subject.PROJECT,
            {"organization_id": organization_id},
            organization_context(organization_id),
        )

    async def can_read_tasks_by_project(self, actor: Optional[Actor], project_id: str) -> bool:
        return await self._can_on_project_tasks(actor, Action.READ, project_id)
