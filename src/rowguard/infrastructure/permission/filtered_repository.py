"""Repository wrapper whose reads always pass through the permission filter."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from rowguard.application.ports import QueryExecutor
from rowguard.domain.exceptions import QueryConfigurationError
from rowguard.domain.value_objects import EntityMetadata
from rowguard.infrastructure.permission.permission_query_filter import PermissionQueryFilter
from rowguard.infrastructure.persistence.postgres.schema import get_entity_metadata
from rowguard.infrastructure.persistence.postgres.select_query import SelectQuery

logger = logging.getLogger(__name__)


class PermissionFilteredRepository:
    """Find operations over one entity, scoped to a user and action.

    ``where`` maps columns to values (equality), ``order`` maps columns to
    ``ASC``/``DESC`` and ``relations`` names relations to left join, each under
    an alias equal to the relation name. Unknown columns raise ValidationError.
    Filtering on a column the user may not read returns no rows.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        metadata: EntityMetadata,
        query_filter: PermissionQueryFilter,
        user_id: str,
        action: str,
    ) -> None:
        self._executor = executor
        self._metadata = metadata
        self._filter = query_filter
        self._user_id = user_id
        self._action = action

    async def create_query(self, alias: str | None = None) -> SelectQuery:
        """New query on the entity with the permission filter already applied."""
        query = SelectQuery(self._metadata, alias)
        await self._filter.apply(query, self._user_id, self._action)
        return query

    async def _filtered(
        self,
        where: Mapping[str, Any] | None,
        relations: Sequence[str],
        order: Mapping[str, str] | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> SelectQuery:
        query = SelectQuery(self._metadata)
        for relation in relations:
            query.left_join(relation, relation)
        for column, value in (where or {}).items():
            query.where(column, value)
        for column, direction in (order or {}).items():
            query.order_by(column, direction)
        query.offset(skip).limit(take)
        await self._filter.apply(query, self._user_id, self._action)
        hidden = set(where or {}) - set(query.selected(query.alias))
        if hidden:
            logger.debug(
                "Filter on unreadable columns %s of %s; returning no rows",
                sorted(hidden),
                self._metadata.subject,
            )
            self._filter.deny(query)
        return query

    async def find(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        skip: int | None = None,
        take: int | None = None,
        order: Mapping[str, str] | None = None,
        relations: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        query = await self._filtered(where, relations, order, skip, take)
        return await self._executor.fetch_all(query)

    async def find_one(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        relations: Sequence[str] = (),
    ) -> dict[str, Any] | None:
        query = await self._filtered(where, relations)
        return await self._executor.fetch_one(query)

    async def find_and_count(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        skip: int | None = None,
        take: int | None = None,
        order: Mapping[str, str] | None = None,
        relations: Sequence[str] = (),
    ) -> tuple[list[dict[str, Any]], int]:
        query = await self._filtered(where, relations, order, skip, take)
        items = await self._executor.fetch_all(query)
        total = await self._executor.count(query)
        return items, total


def create_filtered_repository_factory(query_filter: PermissionQueryFilter):
    """Factory building filtered repositories by subject name."""

    def factory(
        executor: QueryExecutor, subject: str, user_id: str, action: str
    ) -> PermissionFilteredRepository:
        metadata = get_entity_metadata(subject)
        if metadata is None:
            raise QueryConfigurationError(f"No metadata for {subject}")
        return PermissionFilteredRepository(executor, metadata, query_filter, user_id, action)

    return factory
