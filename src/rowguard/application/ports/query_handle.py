"""Query handle port - what the permission filter needs from a query builder."""

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from psycopg import sql

from rowguard.domain.value_objects import EntityMetadata, RelationMetadata


class AliasAttribute(Protocol):
    """Alias of the root entity in a query."""

    alias: str
    metadata: EntityMetadata


class JoinAttribute(AliasAttribute, Protocol):
    """Alias of a joined entity, attached to a parent alias through a relation."""

    parent_alias: str
    relation: RelationMetadata


class QueryHandle(Protocol):
    """Composable select query that the permission filter rewrites in place."""

    @property
    def main_alias(self) -> AliasAttribute | None: ...

    @property
    def joins(self) -> Sequence[JoinAttribute]: ...

    def clear_select(self) -> None: ...

    def add_select(self, alias: str, columns: Iterable[str]) -> None: ...

    def and_where(
        self,
        predicate: sql.Composable,
        params: Sequence[object] = (),
        *,
        tag: str | None = None,
    ) -> None: ...

    def remove_where(self, tag: str) -> None: ...


class RenderableQuery(QueryHandle, Protocol):
    """Query handle that renders to SQL and hydrates its own rows."""

    def build(self) -> tuple[sql.Composed, list[object]]: ...

    def build_count(self) -> tuple[sql.Composed, list[object]]: ...

    def hydrate(self, rows: Iterable[Sequence[Any]]) -> list[dict[str, Any]]: ...
