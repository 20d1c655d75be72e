"""Composable SELECT query over entity metadata, rendered with psycopg.sql.

Every identifier goes through ``sql.Identifier`` and every value through a
``%s`` placeholder, so predicates never contain interpolated literals.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg import sql

from rowguard.domain.exceptions import QueryConfigurationError, ValidationError
from rowguard.domain.value_objects import EntityMetadata, RelationMetadata, is_safe_identifier
from rowguard.infrastructure.persistence.postgres.schema import get_entity_metadata

MetadataResolver = Callable[[str], EntityMetadata | None]


@dataclass(frozen=True)
class QueryAlias:
    """Root alias of a query."""

    alias: str
    metadata: EntityMetadata


@dataclass(frozen=True)
class QueryJoin:
    """Joined alias attached to ``parent_alias`` through ``relation``."""

    alias: str
    metadata: EntityMetadata
    parent_alias: str
    relation: RelationMetadata


@dataclass(frozen=True)
class _Predicate:
    predicate: sql.Composable
    params: tuple[object, ...]
    tag: str | None


class SelectQuery:
    """SELECT builder with per-alias column selection, tagged predicates and hydration."""

    def __init__(
        self,
        metadata: EntityMetadata,
        alias: str | None = None,
        metadata_resolver: MetadataResolver = get_entity_metadata,
    ) -> None:
        alias = alias or metadata.table
        if not is_safe_identifier(alias):
            raise QueryConfigurationError(f"Invalid alias {alias!r}")
        self._main = QueryAlias(alias=alias, metadata=metadata)
        self._resolve = metadata_resolver
        self._joins: list[QueryJoin] = []
        self._selection: dict[str, list[str]] = {alias: list(metadata.columns)}
        self._where: list[_Predicate] = []
        self._order: list[tuple[str, str, str]] = []
        self._limit: int | None = None
        self._offset: int | None = None

    @property
    def main_alias(self) -> QueryAlias:
        return self._main

    @property
    def alias(self) -> str:
        return self._main.alias

    @property
    def joins(self) -> tuple[QueryJoin, ...]:
        return tuple(self._joins)

    def alias_attribute(self, alias: str) -> QueryAlias | QueryJoin | None:
        if alias == self._main.alias:
            return self._main
        for join in self._joins:
            if join.alias == alias:
                return join
        return None

    def _require_alias(self, alias: str) -> QueryAlias | QueryJoin:
        attr = self.alias_attribute(alias)
        if attr is None:
            raise QueryConfigurationError(f"Unknown alias {alias!r}")
        return attr

    def left_join(
        self, relation: str, alias: str, parent_alias: str | None = None
    ) -> "SelectQuery":
        """Join a relation of ``parent_alias`` (root by default), selecting all its columns."""
        parent = self._require_alias(parent_alias or self._main.alias)
        rel = parent.metadata.relation(relation)
        if rel is None:
            raise QueryConfigurationError(
                f"{parent.metadata.subject} has no relation {relation!r}"
            )
        target = self._resolve(rel.target)
        if target is None:
            raise QueryConfigurationError(f"No metadata for {rel.target}")
        if not is_safe_identifier(alias) or not is_safe_identifier(rel.remote_column):
            raise QueryConfigurationError(f"Invalid join alias {alias!r}")
        if self.alias_attribute(alias) is not None:
            raise QueryConfigurationError(f"Alias {alias!r} already used")
        self._joins.append(
            QueryJoin(alias=alias, metadata=target, parent_alias=parent.alias, relation=rel)
        )
        self._selection[alias] = list(target.columns)
        return self

    # --- selection ---

    def clear_select(self) -> None:
        self._selection = {}

    def add_select(self, alias: str, columns: Iterable[str]) -> None:
        attr = self._require_alias(alias)
        selected = self._selection.setdefault(alias, [])
        for column in columns:
            if not attr.metadata.has_column(column):
                raise ValidationError(f"{attr.metadata.subject} has no column {column!r}")
            if column not in selected:
                selected.append(column)

    def select(self, alias: str, columns: Iterable[str]) -> "SelectQuery":
        self._selection.pop(alias, None)
        self.add_select(alias, columns)
        return self

    def selected(self, alias: str) -> list[str]:
        return list(self._selection.get(alias, []))

    # --- predicates ---

    def and_where(
        self,
        predicate: sql.Composable,
        params: Sequence[object] = (),
        *,
        tag: str | None = None,
    ) -> None:
        """Add a predicate. A tagged predicate replaces the earlier one with the same tag."""
        if tag is not None:
            self._where = [p for p in self._where if p.tag != tag]
        self._where.append(_Predicate(predicate, tuple(params), tag))

    def remove_where(self, tag: str) -> None:
        self._where = [p for p in self._where if p.tag != tag]

    def where(self, column: str, value: object, alias: str | None = None) -> "SelectQuery":
        """Equality predicate on a known column (``None`` becomes IS NULL)."""
        attr = self._require_alias(alias or self._main.alias)
        if not attr.metadata.has_column(column):
            raise ValidationError(f"{attr.metadata.subject} has no column {column!r}")
        ident = sql.Identifier(attr.alias, column)
        if value is None:
            self.and_where(sql.SQL("{} IS NULL").format(ident))
        else:
            self.and_where(sql.SQL("{} = {}").format(ident, sql.Placeholder()), (value,))
        return self

    def predicate_for(self, tag: str) -> tuple[sql.Composable, tuple[object, ...]] | None:
        for p in self._where:
            if p.tag == tag:
                return p.predicate, p.params
        return None

    def where_clause(self) -> tuple[sql.Composable | None, list[object]]:
        """All predicates ANDed together, with params in placeholder order."""
        if not self._where:
            return None, []
        clause = sql.SQL(" AND ").join(
            sql.SQL("({})").format(p.predicate) for p in self._where
        )
        params: list[object] = []
        for p in self._where:
            params.extend(p.params)
        return clause, params

    # --- ordering and paging ---

    def order_by(
        self, column: str, direction: str = "ASC", alias: str | None = None
    ) -> "SelectQuery":
        attr = self._require_alias(alias or self._main.alias)
        if not attr.metadata.has_column(column):
            raise ValidationError(f"{attr.metadata.subject} has no column {column!r}")
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValidationError(f"Invalid order direction {direction!r}")
        self._order.append((attr.alias, column, direction))
        return self

    def limit(self, limit: int | None) -> "SelectQuery":
        self._limit = limit
        return self

    def offset(self, offset: int | None) -> "SelectQuery":
        self._offset = offset
        return self

    # --- rendering ---

    def _layout(self) -> list[tuple[str, str]]:
        layout: list[tuple[str, str]] = []
        for alias in [self._main.alias, *(j.alias for j in self._joins)]:
            layout.extend((alias, c) for c in self._selection.get(alias, []))
        return layout

    def _from_clause(self) -> sql.Composable:
        parts: list[sql.Composable] = [
            sql.SQL(" FROM {} AS {}").format(
                sql.Identifier(self._main.metadata.table), sql.Identifier(self._main.alias)
            )
        ]
        for join in self._joins:
            parts.append(
                sql.SQL(" LEFT JOIN {} AS {} ON {} = {}").format(
                    sql.Identifier(join.metadata.table),
                    sql.Identifier(join.alias),
                    sql.Identifier(join.parent_alias, join.relation.local_column),
                    sql.Identifier(join.alias, join.relation.remote_column),
                )
            )
        return sql.Composed(parts)

    def _order_clause(self, aggregate: bool = False) -> sql.Composable:
        """ORDER BY list; ``aggregate`` wraps columns for a query grouped by root pk."""
        items = []
        for a, c, direction in self._order:
            column: sql.Composable = sql.Identifier(a, c)
            if aggregate:
                column = sql.SQL("{}({})").format(
                    sql.SQL("max" if direction == "DESC" else "min"), column
                )
            items.append(sql.SQL("{} {}").format(column, sql.SQL(direction)))
        return sql.SQL(", ").join(items)

    def _paging(self, params: list[object]) -> list[sql.Composable]:
        parts: list[sql.Composable] = []
        if self._limit is not None:
            parts.append(sql.SQL(" LIMIT {}").format(sql.Placeholder()))
            params.append(self._limit)
        if self._offset is not None:
            parts.append(sql.SQL(" OFFSET {}").format(sql.Placeholder()))
            params.append(self._offset)
        return parts

    def _pages_roots(self) -> bool:
        has_paging = self._limit is not None or self._offset is not None
        return has_paging and any(j.relation.many for j in self._joins)

    def _root_page(self) -> tuple[sql.Composable, list[object]]:
        """Subquery selecting one page of root primary keys."""
        pk = sql.Identifier(self._main.alias, self._main.metadata.primary_key)
        parts: list[sql.Composable] = [sql.SQL("SELECT {}").format(pk), self._from_clause()]
        clause, params = self.where_clause()
        if clause is not None:
            parts.extend([sql.SQL(" WHERE "), clause])
        parts.append(sql.SQL(" GROUP BY {}").format(pk))
        if self._order:
            parts.extend([sql.SQL(" ORDER BY "), self._order_clause(aggregate=True)])
        parts.extend(self._paging(params))
        return sql.Composed(parts), params

    def build(self) -> tuple[sql.Composed, list[object]]:
        """Render the query and its params.

        With a to-many join, LIMIT and OFFSET apply to root entities through a
        subquery of root primary keys, so nested lists are never cut.
        """
        layout = self._layout()
        if not layout:
            raise QueryConfigurationError("Query selects no columns")
        columns = sql.SQL(", ").join(
            sql.SQL("{} AS {}").format(sql.Identifier(a, c), sql.Identifier(f"{a}__{c}"))
            for a, c in layout
        )
        parts: list[sql.Composable] = [sql.SQL("SELECT "), columns, self._from_clause()]
        clause, params = self.where_clause()
        if self._pages_roots():
            page, page_params = self._root_page()
            pk = sql.Identifier(self._main.alias, self._main.metadata.primary_key)
            in_page = sql.SQL("({} IN ({}))").format(pk, page)
            clause = in_page if clause is None else sql.SQL("{} AND {}").format(clause, in_page)
            params.extend(page_params)
        if clause is not None:
            parts.extend([sql.SQL(" WHERE "), clause])
        if self._order:
            parts.extend([sql.SQL(" ORDER BY "), self._order_clause()])
        if not self._pages_roots():
            parts.extend(self._paging(params))
        return sql.Composed(parts), params

    def build_count(self) -> tuple[sql.Composed, list[object]]:
        """Render ``count(DISTINCT root pk)`` with the same joins and predicates."""
        pk = sql.Identifier(self._main.alias, self._main.metadata.primary_key)
        parts: list[sql.Composable] = [
            sql.SQL("SELECT count(DISTINCT {})").format(pk),
            self._from_clause(),
        ]
        clause, params = self.where_clause()
        if clause is not None:
            parts.extend([sql.SQL(" WHERE "), clause])
        return sql.Composed(parts), params

    def hydrate(self, rows: Iterable[Sequence[Any]]) -> list[dict[str, Any]]:
        """Turn flat rows into root dicts with joined relations nested by name.

        Rows are grouped by primary key at every level; a to-one relation with no
        match becomes ``None`` and a to-many relation an empty list.
        """
        layout = self._layout()
        roots: dict[Any, dict[str, Any]] = {}
        root_pk = self._main.metadata.primary_key
        for index, row in enumerate(rows):
            values: dict[str, dict[str, Any]] = {}
            for (alias, column), value in zip(layout, row):
                values.setdefault(alias, {})[column] = value
            root_data = values.get(self._main.alias, {})
            key = root_data.get(root_pk, ("row", index))
            root = roots.get(key)
            if root is None:
                root = roots[key] = dict(root_data)
            objects: dict[str, dict[str, Any] | None] = {self._main.alias: root}
            for join in self._joins:
                parent = objects.get(join.parent_alias)
                if parent is None or join.alias not in values:
                    objects[join.alias] = None
                    continue
                objects[join.alias] = self._attach(parent, join, values[join.alias])
        return list(roots.values())

    @staticmethod
    def _attach(
        parent: dict[str, Any], join: QueryJoin, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        name = join.relation.name
        pk_value = data.get(join.metadata.primary_key)
        if join.relation.many:
            items = parent.setdefault(name, [])
            if pk_value is None:
                return None
            for item in items:
                if item.get(join.metadata.primary_key) == pk_value:
                    return item
            items.append(dict(data))
            return items[-1]
        if pk_value is None:
            parent.setdefault(name, None)
            return None
        current = parent.get(name)
        if current is None or current.get(join.metadata.primary_key) != pk_value:
            parent[name] = dict(data)
        return parent[name]
