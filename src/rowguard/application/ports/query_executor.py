"""Query executor port - runs a built select query."""

from typing import Any, Protocol

from rowguard.application.ports.query_handle import RenderableQuery


class QueryExecutor(Protocol):
    """Executes select queries and returns hydrated rows."""

    async def fetch_all(self, query: RenderableQuery) -> list[dict[str, Any]]: ...

    async def fetch_one(self, query: RenderableQuery) -> dict[str, Any] | None: ...

    async def count(self, query: RenderableQuery) -> int: ...
