"""Subjects (entity types) rules apply to."""

from enum import StrEnum


class SubjectType(StrEnum):
    """Known subject types. ALL matches every subject."""

    USER = "User"
    ARTICLE = "Article"
    PERMISSION = "Permission"
    ROLE = "Role"
    FILE = "File"
    FILES = "Files"
    ALL = "all"
