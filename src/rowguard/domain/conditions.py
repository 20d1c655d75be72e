"""Rule conditions: operators, in-memory matching and user interpolation.

A condition object maps a field to either a literal (equality, ``None`` meaning
``IS NULL``) or an operator object such as ``{"$in": ["a", "b"]}``. Several keys
in one object are combined with AND.
"""

import re
from collections.abc import Mapping
from typing import Any
from uuid import UUID

OPERATORS = frozenset({"$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in"})

_TEMPLATE = re.compile(r"^\$\{user\.([A-Za-z_][A-Za-z0-9_]*)\}$")


class UnsupportedCondition(ValueError):
    """Condition uses an operator or shape that cannot be evaluated."""


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


def _field_value(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _compare(op: str, actual: Any, operand: Any) -> bool:
    actual = _normalize(actual)
    if op == "$in":
        if not isinstance(operand, (list, tuple)):
            raise UnsupportedCondition(f"$in expects a list, got {type(operand).__name__}")
        if not operand:
            # Mirrors SQL translation: empty $in adds no clause
            return True
        if any(v is None for v in operand):
            raise UnsupportedCondition("$in does not accept null; use $eq: null")
        return actual in [_normalize(v) for v in operand]
    operand = _normalize(operand)
    if op == "$eq":
        return actual == operand
    if op == "$ne":
        if operand is None:
            return actual is not None
        # NULL columns never satisfy != in SQL
        return actual is not None and actual != operand
    if op not in OPERATORS:
        raise UnsupportedCondition(f"Unsupported operator {op!r}")
    if actual is None or operand is None:
        return False
    try:
        if op == "$gt":
            return actual > operand
        if op == "$gte":
            return actual >= operand
        if op == "$lt":
            return actual < operand
        return actual <= operand
    except TypeError:
        return False


def matches_conditions(conditions: Mapping[str, Any], obj: Any) -> bool:
    """Evaluate conditions against an object or mapping. Raises UnsupportedCondition."""
    for key, expected in conditions.items():
        actual = _field_value(obj, key)
        if isinstance(expected, Mapping):
            for op, operand in expected.items():
                if not _compare(op, actual, operand):
                    return False
        elif expected is None:
            if actual is not None:
                return False
        elif _normalize(actual) != _normalize(expected):
            return False
    return True


def interpolate_conditions(conditions: Any, context: Mapping[str, Any]) -> Any:
    """Replace ``${user.<attr>}`` strings with values from context.

    Unknown attributes are left as the literal template, which matches nothing.
    """
    if isinstance(conditions, Mapping):
        return {k: interpolate_conditions(v, context) for k, v in conditions.items()}
    if isinstance(conditions, list):
        return [interpolate_conditions(v, context) for v in conditions]
    if isinstance(conditions, str):
        m = _TEMPLATE.match(conditions)
        if m and m.group(1) in context:
            return _normalize(context[m.group(1)])
    return conditions
