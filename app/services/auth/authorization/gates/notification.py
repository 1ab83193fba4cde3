"""
Notification gates.
"""

from typing import Optional

from app.domain.interfaces.authorization import INotificationReader
from app.domain.schemas.auth import Actor

from ..authorization import is_user_admin
from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier


class NotificationGate(BaseGate):
    domain = "notification"

    def __init__(self, notification_reader: INotificationReader):
        self.notification_reader = notification_reader

    async def _check(
        self, actor: Optional[Actor], action: Action, notification_id: str
    ) -> bool:
        notification_id = ensure_identifier(notification_id, "notification_id")
        notification = await self.notification_reader.get_notification_by_id(notification_id)
        if notification is None:
            return False

        return self._can_on_resource(
            actor,
            action,
            Subject.NOTIFICATION,
            {"id": notification.id, "user_id": notification.user_id},
        )

    async def can_read_notification(self, actor: Optional[Actor], notification_id: str) -> bool:
        return await self._check(actor, Action.READ, notification_id)

    async def can_update_notification(self, actor: Optional[Actor], notification_id: str) -> bool:
        return await self._check(actor, Action.UPDATE, notification_id)

    async def can_delete_notification(self, actor: Optional[Actor], notification_id: str) -> bool:
        return await self._check(actor, Action.DELETE, notification_id)

    async def can_read_user_notifications(self, actor: Optional[Actor], user_id: str) -> bool:
        user_id = ensure_identifier(user_id, "user_id")
        return self._can_on_resource(
            actor, Action.READ, Subject.NOTIFICATION, {"user_id": user_id}
        )

    async def can_create_notification(
        self, actor: Optional[Actor], user_id: Optional[str] = None
    ) -> bool:
        """Admins notify anyone; other actors only themselves."""
        if actor is None:
            return False
        if is_user_admin(actor):
            return True
        if user_id is None:
            return self._deny(actor, "create_notification_without_recipient")
        return actor.id == ensure_identifier(user_id, "user_id")

    async def can_manage_notifications(self, actor: Optional[Actor]) -> bool:
        return is_user_admin(actor)
