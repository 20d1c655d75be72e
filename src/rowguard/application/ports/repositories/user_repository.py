"""User repository port - also the rule store for ability builds."""

from typing import Protocol
from uuid import UUID

from rowguard.domain.entities import User


class UserRepository(Protocol):
    """Port for user persistence."""

    async def get_with_roles(self, user_id: str) -> User | None: ...

    async def set_roles(self, user_id: str, role_ids: list[UUID]) -> None: ...

    async def delete(self, user_id: str) -> None: ...
