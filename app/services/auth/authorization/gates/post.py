"""
Blog gates: posts, post translations, categories and hashtags.

Publication state changes (publish, unpublish, archive) are updates of the
post with a status precondition. Translations inherit the rights of their
parent post.
"""

from typing import Iterable, Optional

from app.domain.interfaces.authorization import IPostReader
from app.domain.schemas.auth import Actor
from app.domain.schemas.resources import PostProjection, PostStatus

from ..permissions import Action, Subject
from .base import BaseGate, ensure_identifier


def post_resource(post: PostProjection) -> dict:
    return {"id": post.id, "status": post.status.value, "author_id": post.author_id}


class PostGate(BaseGate):
    domain = "post"

    def __init__(self, post_reader: IPostReader):
        self.post_reader = post_reader

    async def _load_post(self, post_id: str) -> Optional[PostProjection]:
        return await self.post_reader.get_post_by_id(ensure_identifier(post_id, "post_id"))

    def _can_on_post(self, actor: Optional[Actor], action: Action, post: PostProjection) -> bool:
        return self._can_on_resource(actor, action, Subject.POST, post_resource(post))

    # Posts

    async def can_create_post(self, actor: Optional[Actor]) -> bool:
        return self._can_on_resource(actor, Action.CREATE, Subject.POST, {})

    async def _check_post(self, actor: Optional[Actor], action: Action, post_id: str) -> bool:
        post = await self._load_post(post_id)
        if post is None:
            return False
        return self._can_on_post(actor, action, post)

    async def can_read_post(self, actor: Optional[Actor], post_id: str) -> bool:
        return await self._check_post(actor, Action.READ, post_id)

    async def can_update_post(self, actor: Optional[Actor], post_id: str) -> bool:
        return await self._check_post(actor, Action.UPDATE, post_id)

    async def can_delete_post(self, actor: Optional[Actor], post_id: str) -> bool:
        return await self._check_post(actor, Action.DELETE, post_id)

    async def can_publish_post(self, actor: Optional[Actor], post_id: str) -> bool:
        post = await self._load_post(post_id)
        if post is None or post.status == PostStatus.PUBLISHED:
            return False
        return self._can_on_post(actor, Action.UPDATE, post)

    async def can_unpublish_post(self, actor: Optional[Actor], post_id: str) -> bool:
        post = await self._load_post(post_id)
        if post is None or post.status != PostStatus.PUBLISHED:
            return False
        return self._can_on_post(actor, Action.UPDATE, post)

    async def can_archive_post(self, actor: Optional[Actor], post_id: str) -> bool:
        post = await self._load_post(post_id)
        if post is None or post.status == PostStatus.ARCHIVED:
            return False
        return self._can_on_post(actor, Action.UPDATE, post)

    # Translations

    async def can_create_post_translation(self, actor: Optional[Actor], post_id: str) -> bool:
        return await self._check_post(actor, Action.UPDATE, post_id)

    async def _check_translation(
        self, actor: Optional[Actor], action: Action, translation_id: str
    ) -> bool:
        translation = await self.post_reader.get_post_translation_by_id(
            ensure_identifier(translation_id, "translation_id")
        )
        if translation is None:
            return False
        return await self._check_post(actor, action, translation.post_id)

    async def can_read_post_translation(self, actor: Optional[Actor], translation_id: str) -> bool:
        return await self._check_translation(actor, Action.READ, translation_id)

    async def can_update_post_translation(self, actor: Optional[Actor], translation_id: str) -> bool:
        return await self._check_translation(actor, Action.UPDATE, translation_id)

    async def can_delete_post_translation(self, actor: Optional[Actor], translation_id: str) -> bool:
        # Removing a translation edits the post
        return await self._check_translation(actor, Action.UPDATE, translation_id)

    # Categories

    async def can_create_category(self, actor: Optional[Actor]) -> bool:
        return self._can_on_resource(actor, Action.CREATE, Subject.CATEGORY, {})

    async def _check_category(
        self, actor: Optional[Actor], action: Action, category_id: str
    ) -> bool:
        category = await self.post_reader.get_category_by_id(
            ensure_identifier(category_id, "category_id")
        )
        if category is None:
            return False
        return self._can_on_resource(actor, action, Subject.CATEGORY, {"id": category.id})

    async def can_read_category(self, actor: Optional[Actor], category_id: str) -> bool:
        return await self._check_category(actor, Action.READ, category_id)

    async def can_update_category(self, actor: Optional[Actor], category_id: str) -> bool:
        return await self._check_category(actor, Action.UPDATE, category_id)

    async def can_delete_category(self, actor: Optional[Actor], category_id: str) -> bool:
        return await self._check_category(actor, Action.DELETE, category_id)

    # Hashtags

    async def can_create_hashtag(self, actor: Optional[Actor]) -> bool:
        return self._can_on_resource(actor, Action.CREATE, Subject.HASHTAG, {})

    async def _check_hashtag(
        self, actor: Optional[Actor], action: Action, hashtag_id: str
    ) -> bool:
        hashtag = await self.post_reader.get_hashtag_by_id(
            ensure_identifier(hashtag_id, "hashtag_id")
        )
        if hashtag is None:
            return False
        return self._can_on_resource(actor, action, Subject.HASHTAG, {"id": hashtag.id})

    async def can_read_hashtag(self, actor: Optional[Actor], hashtag_id: str) -> bool:
        return await self._check_hashtag(actor, Action.READ, hashtag_id)

    async def can_update_hashtag(self, actor: Optional[Actor], hashtag_id: str) -> bool:
        return await self._check_hashtag(actor, Action.UPDATE, hashtag_id)

    async def can_delete_hashtag(self, actor: Optional[Actor], hashtag_id: str) -> bool:
        return await self._check_hashtag(actor, Action.DELETE, hashtag_id)

    # Listings

    async def can_read_all_posts(self, actor: Optional[Actor]) -> bool:
        """Unfiltered listing, including drafts of other authors."""
        return self._can_on_resource(actor, Action.READ, Subject.POST, {})

    async def can_read_own_posts(self, actor: Optional[Actor]) -> bool:
        if actor is None:
            return False
        return self._can_on_resource(actor, Action.READ, Subject.POST, {"author_id": actor.id})

    async def can_read_all_categories(self, actor: Optional[Actor]) -> bool:
        return self._can_on_resource(actor, Action.READ, Subject.CATEGORY, {})

    async def can_read_all_hashtags(self, actor: Optional[Actor]) -> bool:
        return self._can_on_resource(actor, Action.READ, Subject.HASHTAG, {})

    # Bulk operations

    async def can_bulk_update_posts(self, actor: Optional[Actor], post_ids: Iterable[str]) -> bool:
        if self._can_on_resource(actor, Action.MANAGE, Subject.POST, {}):
            return True
        for post_id in post_ids:
            if not await self.can_update_post(actor, post_id):
                return False
        return True

    async def can_bulk_delete_posts(self, actor: Optional[Actor], post_ids: Iterable[str]) -> bool:
        if self._can_on_resource(actor, Action.MANAGE, Subject.POST, {}):
            return True
        for post_id in post_ids:
            if not await self.can_delete_post(actor, post_id):
                return False
        return True
