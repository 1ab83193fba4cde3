"""
Shared plumbing for per-domain authorization gates.
"""

from typing import Any, Optional
from uuid import UUID

import structlog

from app.core.errors import ErrorCode
from app.core.exceptions import ValidationError
from app.core.logging import log_authorization_decision
from app.domain.schemas.auth import Actor, OrganizationContext

from ..ability import ActionLike, SubjectLike
from ..authorization import user_can, user_can_on_resource

logger = structlog.get_logger(__name__)


def ensure_identifier(value: Any, field: str = "id") -> str:
    """Validate that an identifier is a UUID and return its canonical string."""
    try:
        return str(UUID(str(value)))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(
            "Invalid identifier format",
            field=field,
            error_code=ErrorCode.VAL_INVALID_UUID,
        ) from None


def organization_context(organization_id: str) -> OrganizationContext:
    return OrganizationContext(organization_id=organization_id)


class BaseGate:
    """
    Base class for gates.

    Subclasses receive their readers through the constructor and expose
    async ``can_*`` methods that take the actor explicitly.
    """

    domain: str = "generic"

    def _can(
        self,
        actor: Optional[Actor],
        action: ActionLike,
        subject: SubjectLike,
        org_context: Optional[OrganizationContext] = None,
    ) -> bool:
        return user_can(actor, action, subject, org_context)

    def _can_on_resource(
        self,
        actor: Optional[Actor],
        action: ActionLike,
        subject: SubjectLike,
        resource: Any,
        org_context: Optional[OrganizationContext] = None,
    ) -> bool:
        return user_can_on_resource(actor, action, subject, resource, org_context)

    def _deny(self, actor: Optional[Actor], check: str, **context: Any) -> bool:
        """Log a short-circuit refusal and return False."""
        logger.debug(
            "gate_denied",
            **log_authorization_decision(
                check,
                self.domain,
                False,
                actor_id=actor.id if actor else None,
                **context,
            ),
        )
        return False
