"""Explicit per-alias field selection applied through the permission filter."""

from collections.abc import Iterable

from rowguard.application.ports import QueryHandle
from rowguard.infrastructure.permission.permission_query_filter import PermissionQueryFilter


class EntityFieldSelector:
    """Collects wanted fields per alias, then applies the permission filter.

    Usage:
        await EntityFieldSelector(query, query_filter, user_id, "read") \\
            .select_fields("article", ["title", "summary"]) \\
            .select_fields("author", ["email"]) \\
            .apply()
    """

    def __init__(
        self,
        query: QueryHandle,
        query_filter: PermissionQueryFilter,
        user_id: str,
        action: str,
    ) -> None:
        self._query = query
        self._filter = query_filter
        self._user_id = user_id
        self._action = action
        self._field_map: dict[str, list[str]] = {}

    def select_fields(self, alias: str, fields: Iterable[str]) -> "EntityFieldSelector":
        self._field_map[alias] = list(fields)
        return self

    async def apply(self) -> QueryHandle:
        return await self._filter.apply(
            self._query, self._user_id, self._action, self._field_map
        )
