"""PostgreSQL executor for permission-filtered select queries."""

from typing import Any

from psycopg import AsyncConnection

from rowguard.application.ports import RenderableQuery


class PostgresQueryExecutor:
    """Runs built queries on one connection and hydrates the rows."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def fetch_all(self, query: RenderableQuery) -> list[dict[str, Any]]:
        statement, params = query.build()
        cur = await self._conn.execute(statement, params)
        rows = await cur.fetchall()
        return query.hydrate(rows)

    async def fetch_one(self, query: RenderableQuery) -> dict[str, Any] | None:
        # No LIMIT: to-many joins return several rows for one root
        items = await self.fetch_all(query)
        return items[0] if items else None

    async def count(self, query: RenderableQuery) -> int:
        statement, params = query.build_count()
        cur = await self._conn.execute(statement, params)
        r = await cur.fetchone()
        return int(r[0]) if r else 0
