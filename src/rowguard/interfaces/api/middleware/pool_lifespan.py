"""Lifespan middleware - opens the pool on startup, closes pool and cache on shutdown."""

from typing import Any

from psycopg_pool import AsyncConnectionPool

from rowguard.application.ports import RuleCache


class PoolLifespanMiddleware:
    """Middleware that opens the connection pool on startup and closes on shutdown."""

    def __init__(self, pool: AsyncConnectionPool, cache: RuleCache | None = None) -> None:
        self._pool = pool
        self._cache = cache

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        """Open pool when ASGI server starts."""
        await self._pool.open()

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        """Close pool and cache connections when ASGI server shuts down."""
        await self._pool.close()
        if self._cache is not None:
            await self._cache.close()
