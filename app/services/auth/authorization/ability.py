"""
Ability evaluator.

An Ability is an immutable list of rules with the three query forms used by
the gates: type-level checks, resource-level checks and field filtering.
Denials are expressed as False or an empty mapping, never as exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from .permissions import Action, Rule, Subject, parse_action, parse_subject

ActionLike = Union[Action, str]
SubjectLike = Union[Subject, str]


def as_resource(resource: Any) -> Mapping[str, Any]:
    """Turn a projection, model or mapping into a condition-matchable mapping."""
    if resource is None:
        return {}
    if isinstance(resource, Mapping):
        return resource
    if hasattr(resource, "as_resource"):
        return resource.as_resource()
    if isinstance(resource, BaseModel):
        return resource.model_dump(mode="json")
    return vars(resource)


class Ability:
    """Read-only rule set built for one actor and organization context."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def rules_for(
        self,
        action: ActionLike,
        subject: SubjectLike,
        field: Optional[str] = None,
    ) -> List[Rule]:
        """All rules, positive and inverted, relevant to (action, subject, field)."""
        action = parse_action(action)
        subject = parse_subject(subject)
        return [
            rule for rule in self._rules
            if rule.applies_to(action, subject) and rule.matches_field(field)
        ]

    def can(
        self,
        action: ActionLike,
        subject: SubjectLike,
        field: Optional[str] = None,
    ) -> bool:
        """
        Type-level check.

        True when at least one positive rule exists for the pair, conditioned
        or not, and no unconditional denial applies.
        """
        relevant = self.rules_for(action, subject, field)
        if any(rule.inverted and not rule.conditions for rule in relevant):
            return False
        return any(not rule.inverted for rule in relevant)

    def cannot(
        self,
        action: ActionLike,
        subject: SubjectLike,
        field: Optional[str] = None,
    ) -> bool:
        return not self.can(action, subject, field)

    def can_on_resource(
        self,
        action: ActionLike,
        subject: SubjectLike,
        resource: Any,
        field: Optional[str] = None,
    ) -> bool:
        """
        Resource-level check.

        OR over positive rules, AND over the conditions of one rule. A denial
        whose conditions match the resource overrides every grant.
        """
        data = as_resource(resource)
        relevant = self.rules_for(action, subject, field)
        if any(rule.inverted and rule.matches_conditions(data) for rule in relevant):
            return False
        return any(
            not rule.inverted and rule.matches_conditions(data)
            for rule in relevant
        )

    def filter_fields(
        self,
        action: ActionLike,
        subject: SubjectLike,
        data: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """
        Keep only the keys the actor may act on.

        Total denial yields an empty dict; otherwise keys denied by
        field-level rules are stripped.
        """
        if not self.can(action, subject):
            return {}
        return {
            key: value for key, value in data.items()
            if self.can(action, subject, field=key)
        }

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Ability({[str(rule) for rule in self._rules]})"
