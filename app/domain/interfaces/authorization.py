"""
Collaborator interfaces consumed by the authorization and entitlement engine.

Implementations live in the surrounding application (persistence layer,
session handling, billing provider); the engine only depends on these
contracts.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from app.domain.schemas.auth import Actor, OrganizationMembership
from app.domain.schemas.billing import Plan, Subscription
from app.domain.schemas.resources import (
    CategoryProjection,
    HashtagProjection,
    NotificationProjection,
    OrganizationProjection,
    PostProjection,
    PostTranslationProjection,
    ProjectProjection,
    TaskProjection,
    UserProjection,
)


class IActorResolver(ABC):
    """Resolves the authenticated actor of the current request."""

    @abstractmethod
    async def get_current_actor(self) -> Optional[Actor]:
        """Return the current actor, or None for guests. Idempotent per request."""
        pass

    async def get_active_organization_id(self) -> Optional[str]:
        """Organization selected in the current session, if any."""
        return None


class IUserReader(ABC):
    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserProjection]:
        pass


class IOrganizationReader(ABC):
    @abstractmethod
    async def get_organization_by_id(
        self, organization_id: str
    ) -> Optional[OrganizationProjection]:
        pass


class IMembershipReader(ABC):
    """Reads membership rows of other users (the target of a member operation)."""

    @abstractmethod
    async def get_membership(
        self, organization_id: str, user_id: str
    ) -> Optional[OrganizationMembership]:
        pass


class INotificationReader(ABC):
    @abstractmethod
    async def get_notification_by_id(
        self, notification_id: str
    ) -> Optional[NotificationProjection]:
        pass


class IPostReader(ABC):
    """Blog content: posts, their translations, categories and hashtags."""

    @abstractmethod
    async def get_post_by_id(self, post_id: str) -> Optional[PostProjection]:
        pass

    @abstractmethod
    async def get_post_translation_by_id(
        self, translation_id: str
    ) -> Optional[PostTranslationProjection]:
        pass

    @abstractmethod
    async def get_category_by_id(self, category_id: str) -> Optional[CategoryProjection]:
        pass

    @abstractmethod
    async def get_hashtag_by_id(self, hashtag_id: str) -> Optional[HashtagProjection]:
        pass


class IProjectReader(ABC):
    @abstractmethod
    async def get_project_by_id(self, project_id: str) -> Optional[ProjectProjection]:
        pass

    @abstractmethod
    async def get_task_by_id(self, task_id: str) -> Optional[TaskProjection]:
        pass


class ISubscriptionReader(ABC):
    @abstractmethod
    async def get_subscription_by_id(self, subscription_id: str) -> Optional[Subscription]:
        pass

    @abstractmethod
    async def get_plan_by_id(self, plan_id: str) -> Optional[Plan]:
        pass


class IBillingProvider(ABC):
    """External billing system (subscriptions and plan catalog)."""

    @abstractmethod
    async def list_active_subscriptions(self, reference_id: str) -> List[Subscription]:
        pass

    @abstractmethod
    async def get_plan_by_code(self, code: str) -> Optional[Plan]:
        pass


class IUsageCounter(ABC):
    """Domain counters used to compute the current usage of a limit."""

    @abstractmethod
    async def count_projects(self, reference_id: str) -> int:
        pass

    @abstractmethod
    async def count_members_and_invitations(self, reference_id: str) -> int:
        pass
