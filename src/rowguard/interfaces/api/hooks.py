"""Route policy hooks - ability checks before a responder runs.

Usage:
    @falcon.before(check_policies(can_read(SubjectType.ARTICLE)))
    async def on_get(self, req, resp): ...
"""

from collections.abc import Callable
from typing import Any

import falcon
import falcon.asgi

from rowguard.domain.ability import Ability
from rowguard.domain.value_objects import Action

PolicyHandler = Callable[[Ability], bool] | Any


def _run(handler: PolicyHandler, ability: Ability) -> bool:
    if hasattr(handler, "handle"):
        return bool(handler.handle(ability))
    return bool(handler(ability))


def check_policies(*handlers: PolicyHandler):
    """Falcon before-hook: 401 without a user, 403 unless every handler passes.

    A handler is a callable taking the ability or an object with ``handle(ability)``.
    """

    async def hook(
        req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, params
    ) -> None:
        if not getattr(req.context, "user", None):
            raise falcon.HTTPUnauthorized(title="Unauthorized")
        ability = getattr(req.context, "ability", None) or Ability()
        if not all(_run(h, ability) for h in handlers):
            raise falcon.HTTPForbidden(title="Permission denied")

    return hook


def _can(action: str, subject: str) -> Callable[[Ability], bool]:
    def handler(ability: Ability) -> bool:
        return ability.can(action, subject)

    handler.__name__ = f"can_{action}_{subject}"
    return handler


def can_create(subject: str) -> Callable[[Ability], bool]:
    return _can(Action.CREATE, subject)


def can_read(subject: str) -> Callable[[Ability], bool]:
    return _can(Action.READ, subject)


def can_update(subject: str) -> Callable[[Ability], bool]:
    return _can(Action.UPDATE, subject)


def can_delete(subject: str) -> Callable[[Ability], bool]:
    return _can(Action.DELETE, subject)


def can_manage(subject: str) -> Callable[[Ability], bool]:
    return _can(Action.MANAGE, subject)
