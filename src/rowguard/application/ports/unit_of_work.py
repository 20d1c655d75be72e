"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from rowguard.application.ports.query_executor import QueryExecutor
from rowguard.application.ports.repositories.article_repository import ArticleRepository
from rowguard.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from rowguard.application.ports.repositories.role_repository import RoleRepository
from rowguard.application.ports.repositories.user_repository import UserRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def users(self) -> UserRepository: ...

    @property
    def roles(self) -> RoleRepository: ...

    @property
    def permissions(self) -> PermissionRepository: ...

    @property
    def articles(self) -> ArticleRepository: ...

    @property
    def queries(self) -> QueryExecutor: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
