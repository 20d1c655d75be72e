"""Falcon ASGI application."""

import logging

import falcon
import falcon.asgi
from falcon.asgi import App

from rowguard.interfaces.api.resources.access import (
    PermissionResource,
    RolePermissionsResource,
    RoleResource,
    UserResource,
    UserRolesResource,
)
from rowguard.interfaces.api.resources.articles import ArticleResource, ArticlesResource
from rowguard.interfaces.api.resources.health import HealthResource

logger = logging.getLogger(__name__)


async def log_exception(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    """Last-resort handler: log and answer 500."""
    logger.error(
        "Unhandled error on %s %s", req.method, req.path, exc_info=(type(ex), ex, ex.__traceback__)
    )
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(
    articles_resource: ArticlesResource,
    article_resource: ArticleResource,
    user_resource: UserResource,
    user_roles_resource: UserRolesResource,
    role_resource: RoleResource,
    role_permissions_resource: RolePermissionsResource,
    permission_resource: PermissionResource,
    health_resource: HealthResource,
    middleware: list | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=middleware or [])
    app.add_error_handler(Exception, log_exception)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/articles", articles_resource)
    app.add_route("/v1/articles/{article_id}", article_resource)
    app.add_route("/v1/users/{user_id}", user_resource)
    app.add_route("/v1/users/{user_id}/roles", user_roles_resource)
    app.add_route("/v1/roles/{role_id}", role_resource)
    app.add_route("/v1/roles/{role_id}/permissions", role_permissions_resource)
    app.add_route("/v1/permissions/{permission_id}", permission_resource)
    return app
