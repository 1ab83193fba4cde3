"""
File gates.

Files are not authorized on their own: access is derived from the entity
the file is attached to (a user, an organization, a post) and, for product
and generic files, from the actor's own file rights.
"""

from typing import Dict, Optional

from app.domain.interfaces.authorization import IOrganizationReader, IPostReader, IUserReader
from app.domain.schemas.auth import Actor
from app.domain.schemas.resources import EntityType

from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier, organization_context

# Leading storage path segment -> owning entity type
PATH_PREFIXES: Dict[str, EntityType] = {
    "users": EntityType.USER,
    "organizations": EntityType.ORGANIZATION,
    "products": EntityType.PRODUCT,
    "posts": EntityType.POST,
}


def parse_file_path(path: str):
    """
    Split a storage path like ``users/<id>/avatar.png`` into (entity_type, entity_id).

    Unknown prefixes map to the generic entity type; paths with fewer than two
    segments return None.
    """
    parts = path.split("/")
    if len(parts) < 2:
        return None
    return PATH_PREFIXES.get(parts[0], EntityType.GENERIC), parts[1]


class FileGate(BaseGate):
    domain = "file"

    def __init__(
        self,
        user_reader: IUserReader,
        organization_reader: IOrganizationReader,
        post_reader: IPostReader,
    ):
        self.user_reader = user_reader
        self.organization_reader = organization_reader
        self.post_reader = post_reader

    async def check_file_ownership(
        self,
        actor: Optional[Actor],
        entity_type: EntityType,
        entity_id: str,
        action: Action,
    ) -> bool:
        """Check action on the files of an entity, using the entity's own scope."""
        try:
            entity_type = EntityType(entity_type)
        except ValueError:
            return self._deny(actor, "file_ownership", entity_type=str(entity_type))

        if entity_type == EntityType.USER:
            user = await self.user_reader.get_user_by_id(ensure_identifier(entity_id, "entity_id"))
            if user is None:
                return False
            return self._can_on_resource(actor, action, Subject.FILE, {"user_id": user.id})

        if entity_type == EntityType.ORGANIZATION:
            organization = await self.organization_reader.get_organization_by_id(
                ensure_identifier(entity_id, "entity_id")
            )
            if organization is None:
                return False
            return self._can_on_resource(
                actor,
                action,
                Subject.FILE,
                {"organization_id": organization.id},
                organization_context(organization.id),
            )

        if entity_type == EntityType.POST:
            post = await self.post_reader.get_post_by_id(ensure_identifier(entity_id, "entity_id"))
            if post is None:
                return False
            return self._can_on_resource(
                actor,
                action,
                Subject.POST,
                {"id": post.id, "status": post.status.value, "author_id": post.author_id},
            )

        # Products and generic files belong to the uploader
        if actor is None:
            return False
        return self._can_on_resource(actor, action, Subject.FILE, {"user_id": actor.id})

    async def _check(
        self,
        actor: Optional[Actor],
        action: Action,
        entity_type: EntityType,
        entity_id: str,
    ) -> bool:
        if not self._can(actor, action, Subject.FILE):
            return self._deny(actor, action.value, entity_type=str(entity_type))
        return await self.check_file_ownership(actor, entity_type, entity_id, action)

    async def can_read_file(
        self, actor: Optional[Actor], entity_type: EntityType, entity_id: str
    ) -> bool:
        return await self._check(actor, Action.READ, entity_type, entity_id)

    async def can_upload_file(
        self, actor: Optional[Actor], entity_type: EntityType, entity_id: str
    ) -> bool:
        return await self._check(actor, Action.CREATE, entity_type, entity_id)

    async def can_delete_file(
        self, actor: Optional[Actor], entity_type: EntityType, entity_id: str
    ) -> bool:
        return await self._check(actor, Action.DELETE, entity_type, entity_id)

    async def can_list_files(
        self, actor: Optional[Actor], entity_type: EntityType, entity_id: str
    ) -> bool:
        return await self._check(actor, Action.READ, entity_type, entity_id)

    async def can_access_file_by_path(self, actor: Optional[Actor], path: str) -> bool:
        parsed = parse_file_path(path)
        if parsed is None:
            return False
        entity_type, entity_id = parsed
        return await self.can_read_file(actor, entity_type, entity_id)
