"""Static metadata describing how an entity maps onto a table."""

import re
from dataclasses import dataclass, field

from rowguard.domain.value_objects.subject_type import SubjectType

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def is_safe_identifier(name: object) -> bool:
    """True if name may be used as a table, alias or column identifier."""
    return isinstance(name, str) and bool(IDENTIFIER_PATTERN.match(name))


@dataclass(frozen=True)
class RelationMetadata:
    """Relation from one entity to another.

    Joined as ``parent.local_column = child.remote_column``. ``many`` marks a
    one-to-many relation, hydrated as a list.
    """

    name: str
    target: SubjectType
    local_column: str
    remote_column: str
    many: bool = False


@dataclass(frozen=True)
class EntityMetadata:
    """Subject type, table, primary key, columns and relations of an entity."""

    subject: SubjectType
    table: str
    primary_key: str
    columns: tuple[str, ...]
    relations: tuple[RelationMetadata, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        names = [self.table, self.primary_key, *self.columns]
        for rel in self.relations:
            names.extend([rel.name, rel.local_column])
        bad = [n for n in names if not is_safe_identifier(n)]
        if bad:
            raise ValueError(f"Unsafe identifiers in {self.subject} metadata: {bad}")
        if self.primary_key not in self.columns:
            raise ValueError(f"Primary key {self.primary_key!r} is not a column of {self.table}")

    @property
    def field_names(self) -> tuple[str, ...]:
        """Columns followed by relation names."""
        return self.columns + tuple(r.name for r in self.relations)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def relation(self, name: str) -> RelationMetadata | None:
        for rel in self.relations:
            if rel.name == name:
                return rel
        return None
