"""Repository ports."""

from rowguard.application.ports.repositories.article_repository import ArticleRepository
from rowguard.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from rowguard.application.ports.repositories.role_repository import RoleRepository
from rowguard.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "ArticleRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
