"""Application entry point and composition root."""

import logging

from falcon.asgi import App

from rowguard import __version__
from rowguard.application.use_cases.access.delete_permission import DeletePermissionUseCase
from rowguard.application.use_cases.access.delete_role import DeleteRoleUseCase
from rowguard.application.use_cases.access.delete_user import DeleteUserUseCase
from rowguard.application.use_cases.access.update_permission import UpdatePermissionUseCase
from rowguard.application.use_cases.access.update_role_permissions import (
    UpdateRolePermissionsUseCase,
)
from rowguard.application.use_cases.access.update_user_roles import UpdateUserRolesUseCase
from rowguard.application.use_cases.article.get_article import GetArticleUseCase
from rowguard.application.use_cases.article.list_articles import ListArticlesUseCase
from rowguard.application.use_cases.article.update_article import UpdateArticleUseCase
from rowguard.config import Settings, get_settings
from rowguard.infrastructure.auth.keycloak_provider import KeycloakProvider
from rowguard.infrastructure.cache.rule_cache import create_rule_cache
from rowguard.infrastructure.permission.ability_service import AbilityService
from rowguard.infrastructure.permission.filtered_repository import (
    create_filtered_repository_factory,
)
from rowguard.infrastructure.permission.permission_query_filter import PermissionQueryFilter
from rowguard.infrastructure.persistence.postgres.connection import create_pool
from rowguard.infrastructure.persistence.postgres.unit_of_work import (
    create_uow_factory,
)
from rowguard.interfaces.api.app import create_app
from rowguard.interfaces.api.middleware.ability import AbilityMiddleware
from rowguard.interfaces.api.middleware.auth import AuthMiddleware
from rowguard.interfaces.api.middleware.field_redaction import FieldRedactionMiddleware
from rowguard.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
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


def configure_logging(settings: Settings) -> None:
    """Configure root logging once, from settings."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_rowguard_app() -> App:
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting rowguard v%s (%s)", __version__, settings.environment)

    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)
    cache = create_rule_cache(settings)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("Keycloak client secret not set; all requests are anonymous")

    abilities = AbilityService(uow_factory, cache, ttl=settings.ability_cache_ttl)
    query_filter = PermissionQueryFilter(abilities)
    repositories = create_filtered_repository_factory(query_filter)

    articles_resource = ArticlesResource(ListArticlesUseCase(uow_factory, repositories))
    article_resource = ArticleResource(
        GetArticleUseCase(uow_factory, repositories),
        UpdateArticleUseCase(uow_factory, repositories),
    )
    user_resource = UserResource(DeleteUserUseCase(uow_factory, abilities))
    user_roles_resource = UserRolesResource(UpdateUserRolesUseCase(uow_factory, abilities))
    role_resource = RoleResource(DeleteRoleUseCase(uow_factory, abilities))
    role_permissions_resource = RolePermissionsResource(
        UpdateRolePermissionsUseCase(uow_factory, abilities)
    )
    permission_resource = PermissionResource(
        UpdatePermissionUseCase(uow_factory, abilities),
        DeletePermissionUseCase(uow_factory, abilities),
    )

    return create_app(
        articles_resource=articles_resource,
        article_resource=article_resource,
        user_resource=user_resource,
        user_roles_resource=user_roles_resource,
        role_resource=role_resource,
        role_permissions_resource=role_permissions_resource,
        permission_resource=permission_resource,
        health_resource=HealthResource(pool),
        middleware=[
            PoolLifespanMiddleware(pool, cache),
            AuthMiddleware(keycloak),
            AbilityMiddleware(abilities),
            FieldRedactionMiddleware(),
        ],
    )


def main() -> None:
    """CLI entry point - run uvicorn server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "rowguard.main:create_rowguard_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )
