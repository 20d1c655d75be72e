"""Permission rule entity - one grant or denial."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID

from rowguard.domain.value_objects import SubjectType


@dataclass
class PermissionRule:
    """Persisted rule: action on subject, optionally limited to fields and conditions.

    ``inverted`` turns the grant into a denial. ``reason`` is informational only.
    """

    subject_type: ClassVar[SubjectType] = SubjectType.PERMISSION

    id: UUID
    action: str
    subject: str
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    inverted: bool = False
    reason: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
