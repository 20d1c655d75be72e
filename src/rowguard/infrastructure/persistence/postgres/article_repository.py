"""PostgreSQL article repository implementation (writes only)."""

from typing import Any
from uuid import UUID

from psycopg import AsyncConnection, sql

from rowguard.domain.exceptions import ValidationError

UPDATABLE_COLUMNS = frozenset({"title", "summary", "content", "status"})


class PostgresArticleRepository:
    """Article repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def update(self, article_id: UUID, changes: dict[str, Any]) -> None:
        """Update whitelisted columns of article."""
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValidationError(f"Cannot update article fields: {sorted(unknown)}")
        if not changes:
            return
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
            for column in changes
        )
        await self._conn.execute(
            sql.SQL("UPDATE article SET {}, updated_at = now() WHERE id = {}").format(
                assignments, sql.Placeholder()
            ),
            (*changes.values(), article_id),
        )
