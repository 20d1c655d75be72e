"""Role repository port."""

from typing import Protocol
from uuid import UUID

from rowguard.domain.entities import Role


class RoleRepository(Protocol):
    """Port for role persistence."""

    async def get_by_id(self, role_id: UUID) -> Role | None: ...

    async def list_by_ids(self, role_ids: list[UUID]) -> list[Role]: ...

    async def list_user_ids(self, role_id: UUID) -> list[str]: ...

    async def set_permissions(self, role_id: UUID, permission_ids: list[UUID]) -> None: ...

    async def delete(self, role_id: UUID) -> None: ...
