"""Ability middleware - resolves the request user's ability once per request."""

import logging

import falcon.asgi

from rowguard.application.ports import AbilityProvider
from rowguard.domain.ability import Ability
from rowguard.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


class AbilityMiddleware:
    """Sets req.context.ability; users without a record get an empty ability.

    Must run after AuthMiddleware.
    """

    def __init__(self, abilities: AbilityProvider) -> None:
        self._abilities = abilities

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        req.context.ability = None
        user = getattr(req.context, "user", None)
        if not user:
            return
        try:
            req.context.ability = await self._abilities.get_ability(user.user_id)
        except NotFound:
            logger.info("Authenticated user %s has no user record", user.user_id)
            req.context.ability = Ability()
