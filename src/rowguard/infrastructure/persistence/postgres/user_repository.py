"""PostgreSQL user repository implementation - the rule store for abilities."""

from uuid import UUID

from psycopg import AsyncConnection

from rowguard.domain.entities import Role, User
from rowguard.infrastructure.persistence.postgres.role_repository import load_roles


class PostgresUserRepository:
    """User repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_with_roles(self, user_id: str) -> User | None:
        """Get user with roles and their rules."""
        cur = await self._conn.execute(
            "SELECT id, email, is_admin, first_name, last_name, created_at "
            "FROM users WHERE id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        user = User(
            id=str(r[0]),
            email=r[1],
            is_admin=r[2],
            first_name=r[3],
            last_name=r[4],
            created_at=r[5],
        )
        cur = await self._conn.execute(
            "SELECT r.id, r.name FROM role r JOIN role_user ru ON ru.role_id = r.id "
            "WHERE ru.user_id = %s ORDER BY r.name",
            (user_id,),
        )
        roles = [Role(id=row[0], name=row[1]) for row in await cur.fetchall()]
        user.roles = await load_roles(self._conn, roles)
        return user

    async def set_roles(self, user_id: str, role_ids: list[UUID]) -> None:
        """Replace the roles of user."""
        await self._conn.execute("DELETE FROM role_user WHERE user_id = %s", (user_id,))
        for role_id in role_ids:
            await self._conn.execute(
                "INSERT INTO role_user (role_id, user_id) VALUES (%s, %s)",
                (role_id, user_id),
            )

    async def delete(self, user_id: str) -> None:
        """Delete user."""
        await self._conn.execute("DELETE FROM users WHERE id = %s", (user_id,))
