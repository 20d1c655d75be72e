"""Role entity - named collection of permission rules."""

from dataclasses import dataclass, field
from typing import ClassVar
from uuid import UUID

from rowguard.domain.entities.permission_rule import PermissionRule
from rowguard.domain.value_objects import SubjectType


@dataclass
class Role:
    """Role with its rules in declaration order."""

    subject_type: ClassVar[SubjectType] = SubjectType.ROLE

    id: UUID
    name: str
    permissions: list[PermissionRule] = field(default_factory=list)
