"""Permission rule repository port."""

from typing import Protocol
from uuid import UUID

from rowguard.domain.entities import PermissionRule


class PermissionRepository(Protocol):
    """Port for permission rule persistence."""

    async def get_by_id(self, permission_id: UUID) -> PermissionRule | None: ...

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[PermissionRule]: ...

    async def list_user_ids(self, permission_id: UUID) -> list[str]: ...

    async def update(self, permission: PermissionRule) -> None: ...

    async def delete(self, permission_id: UUID) -> None: ...
