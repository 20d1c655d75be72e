"""Pytest fixtures for rowguard tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

import pytest

from rowguard.domain.entities import PermissionRule, Role, User
from rowguard.infrastructure.permission.ability_service import AbilityService
from rowguard.infrastructure.permission.filtered_repository import (
    create_filtered_repository_factory,
)
from rowguard.infrastructure.permission.permission_query_filter import (
    DENY_ALL,
    PERMISSION_TAG,
    PermissionQueryFilter,
)


# --- In-memory store shared by fake repositories ---


@dataclass
class FakeStore:
    """Rows behind the fake repositories."""

    users: dict[str, User] = field(default_factory=dict)
    roles: dict[UUID, Role] = field(default_factory=dict)
    permissions: dict[UUID, PermissionRule] = field(default_factory=dict)
    articles: dict[UUID, dict[str, Any]] = field(default_factory=dict)

    def add_rule(self, action: str, subject: str, **kwargs: Any) -> PermissionRule:
        rule = PermissionRule(id=uuid4(), action=action, subject=subject, **kwargs)
        self.permissions[rule.id] = rule
        return rule

    def add_role(self, name: str, rules: list[PermissionRule] | None = None) -> Role:
        role = Role(id=uuid4(), name=name, permissions=list(rules or []))
        self.roles[role.id] = role
        return role

    def add_user(
        self, user_id: str, roles: list[Role] | None = None, is_admin: bool = False
    ) -> User:
        user = User(
            id=user_id,
            email=f"{user_id}@example.com",
            is_admin=is_admin,
            roles=list(roles or []),
        )
        self.users[user_id] = user
        return user


class FakeUserRepository:
    """In-memory user repository."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.get_calls = 0

    async def get_with_roles(self, user_id: str) -> User | None:
        self.get_calls += 1
        return self._store.users.get(user_id)

    async def set_roles(self, user_id: str, role_ids: list[UUID]) -> None:
        self._store.users[user_id].roles = [self._store.roles[r] for r in role_ids]

    async def delete(self, user_id: str) -> None:
        self._store.users.pop(user_id, None)


class FakeRoleRepository:
    """In-memory role repository; members are derived from users' roles."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_by_id(self, role_id: UUID) -> Role | None:
        return self._store.roles.get(role_id)

    async def list_by_ids(self, role_ids: list[UUID]) -> list[Role]:
        return [self._store.roles[r] for r in role_ids if r in self._store.roles]

    async def list_user_ids(self, role_id: UUID) -> list[str]:
        return [
            u.id for u in self._store.users.values() if any(r.id == role_id for r in u.roles)
        ]

    async def set_permissions(self, role_id: UUID, permission_ids: list[UUID]) -> None:
        self._store.roles[role_id].permissions = [
            self._store.permissions[p] for p in permission_ids
        ]

    async def delete(self, role_id: UUID) -> None:
        self._store.roles.pop(role_id, None)
        for user in self._store.users.values():
            user.roles = [r for r in user.roles if r.id != role_id]


class FakePermissionRepository:
    """In-memory permission rule repository."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_by_id(self, permission_id: UUID) -> PermissionRule | None:
        return self._store.permissions.get(permission_id)

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[PermissionRule]:
        return [self._store.permissions[p] for p in permission_ids if p in self._store.permissions]

    async def list_user_ids(self, permission_id: UUID) -> list[str]:
        return [
            u.id
            for u in self._store.users.values()
            if any(p.id == permission_id for r in u.roles for p in r.permissions)
        ]

    async def update(self, permission: PermissionRule) -> None:
        self._store.permissions[permission.id] = permission
        for role in self._store.roles.values():
            role.permissions = [
                permission if p.id == permission.id else p for p in role.permissions
            ]

    async def delete(self, permission_id: UUID) -> None:
        self._store.permissions.pop(permission_id, None)
        for role in self._store.roles.values():
            role.permissions = [p for p in role.permissions if p.id != permission_id]


class FakeArticleRepository:
    """In-memory article writes."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def update(self, article_id: UUID, changes: dict[str, Any]) -> None:
        self._store.articles[article_id].update(changes)


class FakeQueryExecutor:
    """Returns store articles projected onto the query's root selection.

    Row predicates other than the deny-all predicate are not evaluated; tests
    pick rows accordingly and inspect ``queries`` for the rendered SQL.
    """

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.queries: list[Any] = []

    def _rows(self, query: Any) -> list[dict[str, Any]]:
        self.queries.append(query)
        tagged = query.predicate_for(PERMISSION_TAG)
        if tagged is not None and tagged[0] is DENY_ALL:
            return []
        columns = query.selected(query.alias)
        return [{c: row.get(c) for c in columns} for row in self._store.articles.values()]

    async def fetch_all(self, query: Any) -> list[dict[str, Any]]:
        return self._rows(query)

    async def fetch_one(self, query: Any) -> dict[str, Any] | None:
        rows = self._rows(query)
        return rows[0] if rows else None

    async def count(self, query: Any) -> int:
        return len(self._rows(query))


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories over one store."""

    def __init__(self, store: FakeStore | None = None) -> None:
        self.store = store or FakeStore()
        self.users = FakeUserRepository(self.store)
        self.roles = FakeRoleRepository(self.store)
        self.permissions = FakePermissionRepository(self.store)
        self.articles = FakeArticleRepository(self.store)
        self.queries = FakeQueryExecutor(self.store)
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass


class FakeRuleCache:
    """Dict-backed cache with the aiocache get/set/delete surface."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}
        self.deleted: list[str] = []

    async def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> int:
        self.deleted.append(key)
        return 1 if self.data.pop(key, None) is not None else 0

    async def close(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same UoW for every call, committing on success."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow
        await uow.commit()

    return factory


# --- Fixtures ---


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_uow(store: FakeStore) -> FakeUnitOfWork:
    """In-memory UnitOfWork over the test's store."""
    return FakeUnitOfWork(store)


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager with the shared FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def rule_cache() -> FakeRuleCache:
    return FakeRuleCache()


@pytest.fixture
def ability_service(uow_factory, rule_cache: FakeRuleCache) -> AbilityService:
    return AbilityService(uow_factory, rule_cache)


@pytest.fixture
def query_filter(ability_service: AbilityService) -> PermissionQueryFilter:
    return PermissionQueryFilter(ability_service)


@pytest.fixture
def repositories(query_filter: PermissionQueryFilter):
    return create_filtered_repository_factory(query_filter)
