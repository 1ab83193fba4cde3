"""
Administration dashboard gates.
"""

from typing import Optional

from app.domain.schemas.auth import Actor

from ..authorization import is_user_admin
from .base import BaseGate


class AdminDashboardGate(BaseGate):
    domain = "admin_dashboard"

    async def can_access_admin_dashboard(self, actor: Optional[Actor]) -> bool:
        if actor is None:
            return False
        return is_user_admin(actor)

    async def can_view_user_statistics(self, actor: Optional[Actor]) -> bool:
        return await self.can_access_admin_dashboard(actor)

    async def can_view_organization_statistics(self, actor: Optional[Actor]) -> bool:
        return await self.can_access_admin_dashboard(actor)
