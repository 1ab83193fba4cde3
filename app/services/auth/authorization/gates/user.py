"""
User profile gates.
"""

from typing import Optional

from app.domain.interfaces.authorization import IUserReader
from app.domain.schemas.auth import Actor

from ..authorization import is_user_admin
from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier


class UserGate(BaseGate):
    domain = "user"

    def __init__(self, user_reader: IUserReader):
        self.user_reader = user_reader

    async def _check(self, actor: Optional[Actor], action: Action, user_id: str) -> bool:
        user_id = ensure_identifier(user_id, "user_id")
        target = await self.user_reader.get_user_by_id(user_id)
        if target is None:
            return self._deny(actor, "user_not_found", user_id=user_id)

        return self._can_on_resource(
            actor,
            action,
            Subject.USER,
            {"id": target.id, "visibility": target.visibility.value},
        )

    async def can_read_user(self, actor: Optional[Actor], user_id: str) -> bool:
        """Own profile, public profiles, or any profile for admins."""
        return await self._check(actor, Action.READ, user_id)

    async def can_update_user(self, actor: Optional[Actor], user_id: str) -> bool:
        return await self._check(actor, Action.UPDATE, user_id)

    async def is_admin(self, actor: Optional[Actor]) -> bool:
        return is_user_admin(actor)

    async def can_manage_users(self, actor: Optional[Actor]) -> bool:
        return is_user_admin(actor)
