"""Shared actor authorization for use cases."""

from typing import Any

from rowguard.application.ports import AbilityProvider
from rowguard.domain.exceptions import NotFound, PermissionDenied


async def require(
    abilities: AbilityProvider, actor_id: str, action: str, subject: Any
) -> None:
    """Raise PermissionDenied unless actor may perform action on subject.

    An actor without a user record has no rules.
    """
    try:
        allowed = await abilities.can(actor_id, action, subject)
    except NotFound:
        allowed = False
    if not allowed:
        name = subject if isinstance(subject, str) else type(subject).subject_type
        raise PermissionDenied(f"User cannot {action} {name}")
