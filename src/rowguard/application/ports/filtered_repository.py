"""Filtered repository port - reads scoped to a user's ability."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from rowguard.application.ports.query_executor import QueryExecutor


class FilteredRepository(Protocol):
    """Find operations that only return permitted rows and columns."""

    async def find(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        skip: int | None = None,
        take: int | None = None,
        order: Mapping[str, str] | None = None,
        relations: Sequence[str] = (),
    ) -> list[dict[str, Any]]: ...

    async def find_one(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        relations: Sequence[str] = (),
    ) -> dict[str, Any] | None: ...

    async def find_and_count(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        skip: int | None = None,
        take: int | None = None,
        order: Mapping[str, str] | None = None,
        relations: Sequence[str] = (),
    ) -> tuple[list[dict[str, Any]], int]: ...


class FilteredRepositoryFactory(Protocol):
    """Creates a filtered repository over one subject for a user and action."""

    def __call__(
        self, executor: QueryExecutor, subject: str, user_id: str, action: str
    ) -> FilteredRepository: ...
