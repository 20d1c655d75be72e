"""Article entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar
from uuid import UUID

from rowguard.domain.value_objects import SubjectType


@dataclass
class Article:
    """Article written by a user."""

    subject_type: ClassVar[SubjectType] = SubjectType.ARTICLE

    id: UUID
    title: str
    author_id: str
    summary: str | None = None
    content: str | None = None
    status: str = "draft"
    created_at: datetime | None = None
    updated_at: datetime | None = None
