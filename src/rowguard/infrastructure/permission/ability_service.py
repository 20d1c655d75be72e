"""Ability service - per-user ability cache over the rule store."""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from rowguard.application.ports import RuleCache
from rowguard.domain.ability import Ability
from rowguard.domain.exceptions import MalformedRules, NotFound
from rowguard.infrastructure.permission.ability_factory import AbilityFactory

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "ability_rules_by_user_id_"
DEFAULT_TTL = 3600


def cache_key(user_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{user_id}"


class AbilityService:
    """Resolves abilities from cache or the rule store; invalidated on rule mutations.

    The cache stores raw rule lists, never live Ability objects. Concurrent
    misses for the same user may both rebuild and write; the rebuild is
    idempotent so the last write wins.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: RuleCache,
        factory: AbilityFactory | None = None,
        ttl: int = DEFAULT_TTL,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._factory = factory or AbilityFactory()
        self._ttl = ttl

    async def get_ability(self, user_id: str) -> Ability:
        """Cached ability for user. Raises NotFound for unknown users."""
        key = cache_key(user_id)
        try:
            raw = await self._cache.get(key)
        except ValueError as e:
            # Serializer could not decode the stored value
            logger.warning("Discarding undecodable cached rules for user %s: %s", user_id, e)
            await self._cache.delete(key)
            raw = None
        if raw is not None:
            try:
                ability = self._factory.create_from_rules(raw)
                logger.debug("Cache hit for user abilities: %s", user_id)
                return ability
            except MalformedRules as e:
                logger.warning("Discarding malformed cached rules for user %s: %s", user_id, e)
                await self._cache.delete(key)
        else:
            logger.debug("Cache miss for user abilities: %s", user_id)

        ability = await self._build(user_id)
        await self._cache.set(key, ability.to_raw(), ttl=self._ttl)
        logger.debug("Cached user abilities for: %s", user_id)
        return ability

    async def _build(self, user_id: str) -> Ability:
        async with self._uow_factory() as uow:
            user = await uow.users.get_with_roles(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return self._factory.create_for_user(user)

    async def invalidate(self, user_id: str) -> None:
        """Drop the cached rules of user."""
        await self._cache.delete(cache_key(user_id))
        logger.debug("Invalidated cache for user: %s", user_id)

    async def invalidate_many(self, user_ids: Iterable[str]) -> None:
        """Drop cached rules for every user id, concurrently."""
        unique = list(dict.fromkeys(user_ids))
        if unique:
            await asyncio.gather(*(self.invalidate(u) for u in unique))

    async def can(
        self, user_id: str, action: str, subject: Any, field: str | None = None
    ) -> bool:
        ability = await self.get_ability(user_id)
        return ability.can(action, subject, field)

    async def cannot(
        self, user_id: str, action: str, subject: Any, field: str | None = None
    ) -> bool:
        ability = await self.get_ability(user_id)
        return ability.cannot(action, subject, field)
