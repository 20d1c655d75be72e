"""Compiled rule set answering can/cannot queries for one user."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from rowguard.domain.conditions import UnsupportedCondition, matches_conditions
from rowguard.domain.exceptions import MalformedRules
from rowguard.domain.value_objects import Action, SubjectType

WILDCARD_FIELD = "*"


def _normalize_fields(fields: Any) -> tuple[str, ...] | None:
    if fields is None:
        return None
    if isinstance(fields, str) or not isinstance(fields, Sequence):
        raise MalformedRules(f"fields must be a list, got {type(fields).__name__}")
    if not all(isinstance(f, str) for f in fields):
        raise MalformedRules("fields must contain only strings")
    if not fields or WILDCARD_FIELD in fields:
        return None
    return tuple(fields)


def _normalize_conditions(conditions: Any) -> dict[str, Any] | None:
    if conditions is None:
        return None
    if not isinstance(conditions, Mapping):
        raise MalformedRules(f"conditions must be an object, got {type(conditions).__name__}")
    return dict(conditions) or None


@dataclass(frozen=True)
class Rule:
    """Normalized rule. ``fields=None`` means all fields, ``conditions=None`` all rows."""

    action: str
    subject: str
    fields: tuple[str, ...] | None = None
    conditions: dict[str, Any] | None = None
    inverted: bool = False
    reason: str = ""

    @classmethod
    def create(
        cls,
        action: str,
        subject: str,
        fields: Any = None,
        conditions: Any = None,
        inverted: bool = False,
        reason: str | None = None,
    ) -> "Rule":
        if not isinstance(action, str) or not action:
            raise MalformedRules("rule action must be a non-empty string")
        if not isinstance(subject, str) or not subject:
            raise MalformedRules("rule subject must be a non-empty string")
        return cls(
            action=str(action),
            subject=str(subject),
            fields=_normalize_fields(fields),
            conditions=_normalize_conditions(conditions),
            inverted=bool(inverted),
            reason=reason or "",
        )

    @classmethod
    def from_raw(cls, raw: Any) -> "Rule":
        """Rebuild a rule from its cached dict form."""
        if not isinstance(raw, Mapping):
            raise MalformedRules(f"rule must be an object, got {type(raw).__name__}")
        try:
            return cls.create(
                action=raw["action"],
                subject=raw["subject"],
                fields=raw.get("fields"),
                conditions=raw.get("conditions"),
                inverted=raw.get("inverted", False),
                reason=raw.get("reason"),
            )
        except KeyError as e:
            raise MalformedRules(f"rule is missing {e}") from e

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"action": self.action, "subject": self.subject}
        if self.fields is not None:
            raw["fields"] = list(self.fields)
        if self.conditions is not None:
            raw["conditions"] = self.conditions
        if self.inverted:
            raw["inverted"] = True
        if self.reason:
            raw["reason"] = self.reason
        return raw

    def matches_action(self, action: str) -> bool:
        return self.action == action or self.action == Action.MANAGE

    def matches_subject(self, subject: str) -> bool:
        return self.subject == subject or self.subject == SubjectType.ALL

    def matches_field(self, field: str | None) -> bool:
        if self.fields is None:
            return True
        if field is None:
            # A field-limited denial does not deny the whole subject
            return not self.inverted
        return field in self.fields

    def matches_conditions(self, obj: Any) -> bool:
        if not self.conditions:
            return True
        if obj is None:
            # Type-level query: conditional grants may apply, conditional denials do not
            return not self.inverted
        try:
            return matches_conditions(self.conditions, obj)
        except UnsupportedCondition:
            return self.inverted


ADMIN_RULE = Rule(action=Action.MANAGE.value, subject=SubjectType.ALL.value, reason="administrator")


def detect_subject(subject: Any) -> tuple[str, Any]:
    """Return (subject type name, instance or None) for a type name or tagged entity."""
    if isinstance(subject, str):
        return str(subject), None
    tag = getattr(type(subject), "subject_type", None)
    if tag is None:
        raise TypeError(f"Cannot detect subject type of {type(subject).__name__}")
    return str(tag), subject


class Ability:
    """Ordered rules with deny-overrides evaluation.

    Any matching inverted rule vetoes regardless of order; otherwise any
    matching grant allows; otherwise access is denied.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def rules_for(self, action: str, subject: Any) -> list[Rule]:
        """Rules whose action matches (or is manage) and subject matches (or is all)."""
        subject_name, _ = detect_subject(subject)
        return [
            r
            for r in self._rules
            if r.matches_action(action) and r.matches_subject(subject_name)
        ]

    def can(self, action: str, subject: Any, field: str | None = None) -> bool:
        subject_name, instance = detect_subject(subject)
        allowed = False
        for rule in self.rules_for(action, subject_name):
            if not rule.matches_field(field) or not rule.matches_conditions(instance):
                continue
            if rule.inverted:
                return False
            allowed = True
        return allowed

    def cannot(self, action: str, subject: Any, field: str | None = None) -> bool:
        return not self.can(action, subject, field)

    def permitted_fields(
        self, action: str, subject: Any, candidates: Iterable[str]
    ) -> list[str]:
        """Candidates the ability allows, in candidate order."""
        return [f for f in candidates if self.can(action, subject, f)]

    def to_raw(self) -> list[dict[str, Any]]:
        return [r.to_raw() for r in self._rules]

    def __repr__(self) -> str:
        return f"Ability(rules={len(self._rules)})"
