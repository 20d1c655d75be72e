"""Permission query filter - restricts the columns and rows a query may return.

Given a query handle, a user and an action, the filter

1. resolves the user's ability,
2. empties the result when no grant applies to the root subject,
3. selects only permitted columns of the root alias (primary key always kept),
4. does the same for every joined alias, walking nested joins from their parent,
5. ANDs a row predicate built from rule conditions.

Missing permission is not an error: the query is rewritten to return zero
rows. Any unexpected failure after the root alias has been validated has the
same outcome.
"""

import logging
from collections.abc import Mapping, Sequence

from psycopg import sql

from rowguard.application.ports import AliasAttribute, QueryHandle
from rowguard.domain.ability import Ability, Rule
from rowguard.domain.conditions import UnsupportedCondition
from rowguard.domain.exceptions import NotFound, QueryConfigurationError
from rowguard.domain.value_objects import EntityMetadata
from rowguard.infrastructure.permission.ability_service import AbilityService
from rowguard.infrastructure.permission.condition_translator import (
    build_condition_clauses,
    combine_and,
    combine_or,
)

logger = logging.getLogger(__name__)

PERMISSION_TAG = "permission"
DENY_ALL = sql.SQL("1 = 0")

FieldsByAlias = Mapping[str, Sequence[str]]


class _DenyAll(Exception):
    """Internal signal: the query must return no rows."""


class PermissionQueryFilter:
    """Rewrites query handles in place according to a user's ability."""

    def __init__(self, ability_service: AbilityService) -> None:
        self._abilities = ability_service

    async def apply(
        self,
        query: QueryHandle,
        user_id: str,
        action: str,
        fields_by_alias: FieldsByAlias | None = None,
    ) -> QueryHandle:
        """Filter query for user and action. Raises QueryConfigurationError only."""
        main = query.main_alias
        if main is None or not getattr(main, "alias", None) or getattr(main, "metadata", None) is None:
            raise QueryConfigurationError("Query must have a main alias with entity metadata")
        try:
            ability = await self._abilities.get_ability(user_id)
            self._apply_ability(query, ability, action, fields_by_alias)
        except _DenyAll:
            self.deny(query)
        except NotFound:
            logger.debug("No user record for %s; returning no rows", user_id)
            self.deny(query)
        except Exception:
            logger.exception(
                "Permission filtering failed for user %s, action %s on %s; returning no rows",
                user_id,
                action,
                main.metadata.subject,
            )
            self.deny(query)
        return query

    def _apply_ability(
        self,
        query: QueryHandle,
        ability: Ability,
        action: str,
        fields_by_alias: FieldsByAlias | None = None,
    ) -> None:
        """Raises _DenyAll when nothing is granted."""
        fields_by_alias = fields_by_alias or {}
        main = query.main_alias
        metadata = main.metadata
        rules = ability.rules_for(action, metadata.subject)
        if not any(not r.inverted for r in rules):
            logger.debug("No %s grant on %s; returning no rows", action, metadata.subject)
            raise _DenyAll()

        predicate, params = self._row_predicate(rules, main.alias, metadata)

        query.clear_select()
        query.add_select(
            main.alias,
            self._allowed_columns(ability, rules, action, metadata, fields_by_alias.get(main.alias)),
        )
        self._select_joins(query, ability, action, main.alias, fields_by_alias)

        if predicate is not None:
            query.and_where(predicate, params, tag=PERMISSION_TAG)
        else:
            query.remove_where(PERMISSION_TAG)

    def _select_joins(
        self,
        query: QueryHandle,
        ability: Ability,
        action: str,
        parent_alias: str,
        fields_by_alias: FieldsByAlias,
    ) -> None:
        for join in query.joins:
            if join.parent_alias != parent_alias:
                continue
            rules = ability.rules_for(action, join.metadata.subject)
            columns = self._allowed_columns(
                ability, rules, action, join.metadata, fields_by_alias.get(join.alias)
            )
            query.add_select(join.alias, columns)
            self._select_joins(query, ability, action, join.alias, fields_by_alias)

    @staticmethod
    def _allowed_columns(
        ability: Ability,
        rules: list[Rule],
        action: str,
        metadata: EntityMetadata,
        wanted: Sequence[str] | None,
    ) -> list[str]:
        """Permitted columns of an entity, primary key first."""
        known = metadata.field_names
        candidates = list(known) if wanted is None else [f for f in wanted if f in known]
        permitted = ability.permitted_fields(action, metadata.subject, candidates)
        # Column lists cannot vary per row, so conditional field denials always apply
        conditionally_denied = {
            f
            for r in rules
            if r.inverted and r.conditions and r.fields
            for f in r.fields
        }
        columns = [metadata.primary_key]
        for f in permitted:
            if f in conditionally_denied or not metadata.has_column(f) or f in columns:
                continue
            columns.append(f)
        return columns

    @staticmethod
    def _row_predicate(
        rules: list[Rule], alias: str, metadata: EntityMetadata
    ) -> tuple[sql.Composable | None, list[object]]:
        """OR of grant conditions, AND NOT of row-level denial conditions.

        Returns (None, []) when every row is accessible. Raises _DenyAll when no
        grant survives translation or a denial cannot be translated.
        """
        grant_parts: list[sql.Composable] = []
        grant_params: list[object] = []
        unrestricted = False
        for rule in rules:
            if rule.inverted:
                continue
            if not rule.conditions:
                unrestricted = True
                break
            try:
                clauses, rule_params = build_condition_clauses(rule.conditions, alias, metadata)
            except UnsupportedCondition as e:
                logger.warning("Ignoring %s grant on %s: %s", rule.action, rule.subject, e)
                continue
            if not clauses:
                unrestricted = True
                break
            grant_parts.append(combine_and(clauses))
            grant_params.extend(rule_params)

        if not unrestricted and not grant_parts:
            raise _DenyAll()

        parts: list[sql.Composable] = []
        params: list[object] = []
        if not unrestricted:
            parts.append(combine_or(grant_parts) if len(grant_parts) > 1 else grant_parts[0])
            params.extend(grant_params)

        for rule in rules:
            if not rule.inverted or not rule.conditions or rule.fields:
                continue
            try:
                clauses, denial_params = build_condition_clauses(rule.conditions, alias, metadata)
            except UnsupportedCondition as e:
                logger.warning("Untranslatable %s denial on %s: %s", rule.action, rule.subject, e)
                raise _DenyAll() from e
            if not clauses:
                raise _DenyAll()
            parts.append(sql.SQL("NOT ({})").format(combine_and(clauses)))
            params.extend(denial_params)

        if not parts:
            return None, []
        if len(parts) == 1:
            return parts[0], params
        return sql.SQL(" AND ").join(sql.SQL("({})").format(p) for p in parts), params

    @staticmethod
    def deny(query: QueryHandle) -> None:
        """Cut every alias to its primary key and add the unsatisfiable predicate."""
        main: AliasAttribute = query.main_alias
        query.clear_select()
        query.add_select(main.alias, [main.metadata.primary_key])
        for join in query.joins:
            query.add_select(join.alias, [join.metadata.primary_key])
        query.and_where(DENY_ALL, (), tag=PERMISSION_TAG)
