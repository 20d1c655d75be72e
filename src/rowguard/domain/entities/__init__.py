"""Domain entities."""

from rowguard.domain.entities.article import Article
from rowguard.domain.entities.permission_rule import PermissionRule
from rowguard.domain.entities.role import Role
from rowguard.domain.entities.user import User

__all__ = [
    "Article",
    "PermissionRule",
    "Role",
    "User",
]
