"""User entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from rowguard.domain.entities.role import Role
from rowguard.domain.value_objects import SubjectType


@dataclass
class User:
    """User with eager-loaded roles. ``is_admin`` grants manage on all."""

    subject_type: ClassVar[SubjectType] = SubjectType.USER

    id: str
    email: str
    is_admin: bool = False
    first_name: str | None = None
    last_name: str | None = None
    roles: list[Role] = field(default_factory=list)
    created_at: datetime | None = None
