"""Fixtures for API tests."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from falcon.testing import TestClient

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
from rowguard.interfaces.api.app import create_app
from rowguard.interfaces.api.middleware.ability import AbilityMiddleware
from rowguard.interfaces.api.middleware.auth import RequestUser
from rowguard.interfaces.api.middleware.field_redaction import FieldRedactionMiddleware
from rowguard.interfaces.api.resources.access import (
    PermissionResource,
    RolePermissionsResource,
    RoleResource,
    UserResource,
    UserRolesResource,
)
from rowguard.interfaces.api.resources.articles import ArticleResource, ArticlesResource
from rowguard.interfaces.api.resources.health import HealthResource

from tests.conftest import FakeStore


class HeaderAuthMiddleware:
    """Sets context.user from the X-Test-User header."""

    async def process_request(self, req, resp):
        user_id = req.get_header("X-Test-User")
        req.context.user = RequestUser(user_id=user_id) if user_id else None


@pytest.fixture
def seeded(store: FakeStore) -> dict:
    """Admin, a reader who cannot see content, an author of one article, a user without rules."""
    reader_role = store.add_role(
        "reader",
        [
            store.add_rule("read", "Article"),
            store.add_rule("read", "Article", fields=["content"], inverted=True),
        ],
    )
    author_role = store.add_role(
        "author",
        [
            store.add_rule("read", "Article", conditions={"author_id": "${user.id}"}),
            store.add_rule(
                "update",
                "Article",
                fields=["title", "summary"],
                conditions={"author_id": "${user.id}"},
            ),
        ],
    )
    store.add_user("admin", is_admin=True)
    store.add_user("reader", roles=[reader_role])
    store.add_user("u1", roles=[author_role])
    store.add_user("nobody")

    article_id = uuid4()
    store.articles[article_id] = {
        "id": article_id,
        "title": "Hello",
        "summary": "Short",
        "content": "Long body",
        "status": "draft",
        "author_id": "u1",
        "created_at": datetime(2024, 5, 1, tzinfo=UTC),
        "updated_at": datetime(2024, 5, 1, tzinfo=UTC),
    }
    return {"article_id": article_id, "reader_role": reader_role, "author_role": author_role}


@pytest.fixture
def app(uow_factory, ability_service, repositories, seeded):
    """Falcon ASGI app over the fake store with the real ability and redaction middleware."""
    return create_app(
        articles_resource=ArticlesResource(ListArticlesUseCase(uow_factory, repositories)),
        article_resource=ArticleResource(
            GetArticleUseCase(uow_factory, repositories),
            UpdateArticleUseCase(uow_factory, repositories),
        ),
        user_resource=UserResource(DeleteUserUseCase(uow_factory, ability_service)),
        user_roles_resource=UserRolesResource(
            UpdateUserRolesUseCase(uow_factory, ability_service)
        ),
        role_resource=RoleResource(DeleteRoleUseCase(uow_factory, ability_service)),
        role_permissions_resource=RolePermissionsResource(
            UpdateRolePermissionsUseCase(uow_factory, ability_service)
        ),
        permission_resource=PermissionResource(
            UpdatePermissionUseCase(uow_factory, ability_service),
            DeletePermissionUseCase(uow_factory, ability_service),
        ),
        health_resource=HealthResource(),
        middleware=[
            HeaderAuthMiddleware(),
            AbilityMiddleware(ability_service),
            FieldRedactionMiddleware(),
        ],
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)
