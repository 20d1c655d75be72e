"""Ability provider port - resolves and invalidates per-user abilities."""

from collections.abc import Iterable
from typing import Any, Protocol

from rowguard.domain.ability import Ability


class AbilityProvider(Protocol):
    """Port for ability lookup and cache invalidation."""

    async def get_ability(self, user_id: str) -> Ability: ...

    async def invalidate(self, user_id: str) -> None: ...

    async def invalidate_many(self, user_ids: Iterable[str]) -> None: ...

    async def can(
        self, user_id: str, action: str, subject: Any, field: str | None = None
    ) -> bool: ...
