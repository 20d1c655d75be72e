"""Translate rule conditions into parameterized SQL predicates."""

from collections.abc import Mapping
from typing import Any

from psycopg import sql

from rowguard.domain.conditions import UnsupportedCondition
from rowguard.domain.value_objects import EntityMetadata, is_safe_identifier

_COMPARISONS = {
    "$eq": "=",
    "$ne": "!=",
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}

_SCALARS = (str, int, float, bool)


def _check_operand(value: Any) -> Any:
    if value is None or isinstance(value, _SCALARS):
        return value
    # datetime, date, UUID, Decimal are adapted by psycopg
    if isinstance(value, (Mapping, list, tuple, set)):
        raise UnsupportedCondition(f"Unsupported operand type {type(value).__name__}")
    return value


def build_condition_clauses(
    conditions: Mapping[str, Any],
    alias: str,
    metadata: EntityMetadata,
) -> tuple[list[sql.Composable], list[object]]:
    """Build AND-able clauses and params for one rule's conditions.

    Returns (clauses, params). An empty ``$in`` adds no clause. Raises
    UnsupportedCondition for unknown or unsafe columns and unknown operators.
    """
    clauses: list[sql.Composable] = []
    params: list[object] = []
    if not is_safe_identifier(alias):
        raise UnsupportedCondition(f"Unsafe alias {alias!r}")
    for key, expected in conditions.items():
        if not is_safe_identifier(key) or not metadata.has_column(key):
            raise UnsupportedCondition(f"Unknown column {key!r} on {metadata.subject}")
        column = sql.Identifier(alias, key)
        if expected is None:
            clauses.append(sql.SQL("{} IS NULL").format(column))
            continue
        if not isinstance(expected, Mapping):
            expected = {"$eq": expected}
        for op, operand in expected.items():
            if op == "$in":
                if not isinstance(operand, (list, tuple)):
                    raise UnsupportedCondition(f"$in on {key!r} expects a list")
                if not operand:
                    continue
                if any(v is None for v in operand):
                    raise UnsupportedCondition(f"$in on {key!r} contains null")
                values = [_check_operand(v) for v in operand]
                clauses.append(
                    sql.SQL("{} IN ({})").format(
                        column, sql.SQL(", ").join(sql.Placeholder() for _ in values)
                    )
                )
                params.extend(values)
            elif op in _COMPARISONS:
                operand = _check_operand(operand)
                if operand is None:
                    if op == "$eq":
                        clauses.append(sql.SQL("{} IS NULL").format(column))
                    elif op == "$ne":
                        clauses.append(sql.SQL("{} IS NOT NULL").format(column))
                    else:
                        raise UnsupportedCondition(f"{op} on {key!r} compares with null")
                    continue
                clauses.append(
                    sql.SQL("{} {} {}").format(
                        column, sql.SQL(_COMPARISONS[op]), sql.Placeholder()
                    )
                )
                params.append(operand)
            else:
                raise UnsupportedCondition(f"Unsupported operator {op!r} on {key!r}")
    return clauses, params


def combine_and(clauses: list[sql.Composable]) -> sql.Composable:
    """Join clauses with AND; a single clause is returned as is."""
    if len(clauses) == 1:
        return clauses[0]
    return sql.SQL(" AND ").join(clauses)


def combine_or(predicates: list[sql.Composable]) -> sql.Composable:
    """Parenthesize each predicate and join with OR."""
    return sql.SQL(" OR ").join(sql.SQL("({})").format(p) for p in predicates)
