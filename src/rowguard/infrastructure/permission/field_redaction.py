"""Strip fields the ability does not allow from response payloads."""

from typing import Any

from rowguard.domain.ability import Ability
from rowguard.domain.value_objects import Action


def redact_object(obj: Any, ability: Ability, subject: str, action: str = Action.READ) -> Any:
    """Copy of a dict without keys the ability denies. Non-dicts are returned as is."""
    if not isinstance(obj, dict):
        return obj
    return {k: v for k, v in obj.items() if ability.can(action, subject, k)}


def redact_payload(data: Any, ability: Ability, subject: str, action: str = Action.READ) -> Any:
    """Redact a single object, a list of objects or a paginated ``{"items": [...]}`` envelope."""
    if not data:
        return data
    if isinstance(data, list):
        return [redact_object(item, ability, subject, action) for item in data]
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return {
            **data,
            "items": [redact_object(item, ability, subject, action) for item in data["items"]],
        }
    return redact_object(data, ability, subject, action)
