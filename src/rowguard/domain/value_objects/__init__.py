"""Domain value objects."""

from rowguard.domain.value_objects.action import Action
from rowguard.domain.value_objects.entity_metadata import (
    EntityMetadata,
    RelationMetadata,
    is_safe_identifier,
)
from rowguard.domain.value_objects.subject_type import SubjectType

__all__ = [
    "Action",
    "EntityMetadata",
    "RelationMetadata",
    "SubjectType",
    "is_safe_identifier",
]
