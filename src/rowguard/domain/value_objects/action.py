"""Actions a rule can grant or deny."""

from enum import StrEnum


class Action(StrEnum):
    """Built-in actions. Rules may also carry custom verbs as plain strings."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    SUPER_MODIFY = "super-modify"
