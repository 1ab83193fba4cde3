"""
Permission vocabulary for Tenantry.

Defines the closed set of actions and subjects, and the Rule value type
produced by the ability builder.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict

from app.core.errors import ErrorCode
from app.core.exceptions import ValidationError

logger = structlog.get_logger(__name__)


class Action(str, Enum):
    """Actions a rule can grant. MANAGE implies every other action."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class Subject(str, Enum):
    """Resource types. ALL matches every subject."""
    USER = "user"
    SUBSCRIPTION = "subscription"
    ORGANIZATION = "organization"
    PROJECT = "project"
    TASK = "task"
    FILE = "file"
    TECHNICAL = "technical"
    LOG = "log"
    NOTIFICATION = "notification"
    POST = "post"
    CATEGORY = "category"
    HASHTAG = "hashtag"
    ALL = "all"


class Rule(BaseModel):
    """
    Single authorization rule.

    ``conditions`` is a flat equality map tested against a resource; None
    means the rule applies to every resource of the subject. ``restricted_fields``
    restricts the rule to the listed attribute names. ``inverted`` turns the
    rule into an explicit denial.
    """
    model_config = ConfigDict(frozen=True)

    action: Action
    subject: Subject
    conditions: Optional[Dict[str, Any]] = None
    restricted_fields: Optional[FrozenSet[str]] = None
    inverted: bool = False

    def matches_action(self, action: Action) -> bool:
        return self.action == Action.MANAGE or self.action == action

    def matches_subject(self, subject: Subject) -> bool:
        return self.subject == Subject.ALL or self.subject == subject

    def applies_to(self, action: Action, subject: Subject) -> bool:
        return self.matches_action(action) and self.matches_subject(subject)

    def matches_field(self, field: Optional[str]) -> bool:
        """
        Field-restricted rules only speak for their fields.

        Without a field query, a positive field-restricted rule still counts
        as a grant on the subject while an inverted one does not deny it.
        """
        if self.restricted_fields is None:
            return True
        if field is None:
            return not self.inverted
        return field in self.restricted_fields

    def matches_conditions(self, resource: Mapping[str, Any]) -> bool:
        """Every condition key must equal the resource's field."""
        if not self.conditions:
            return True
        return all(
            key in resource and resource[key] == expected
            for key, expected in self.conditions.items()
        )

    def __str__(self) -> str:
        prefix = "cannot" if self.inverted else "can"
        return f"{prefix}:{self.action.value}:{self.subject.value}"


def parse_action(value: Union[Action, str]) -> Action:
    """Parse an action at the boundary, rejecting unknown values."""
    if isinstance(value, Action):
        return value
    try:
        return Action(str(value).lower())
    except ValueError:
        logger.warning("unknown_action_rejected", action=str(value))
        raise ValidationError(
            f"Unknown action: {value}",
            field="action",
            error_code=ErrorCode.VAL_INVALID_ENUM_VALUE,
        )


def parse_subject(value: Union[Subject, str]) -> Subject:
    """Parse a subject at the boundary, rejecting unknown values."""
    if isinstance(value, Subject):
        return value
    try:
        return Subject(str(value).lower())
    except ValueError:
        logger.warning("unknown_subject_rejected", subject=str(value))
        raise ValidationError(
            f"Unknown resource type: {value}",
            field="subject",
            error_code=ErrorCode.VAL_INVALID_ENUM_VALUE,
        )
