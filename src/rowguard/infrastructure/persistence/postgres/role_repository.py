"""PostgreSQL role repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from rowguard.domain.entities import Role
from rowguard.infrastructure.persistence.postgres.permission_repository import (
    RULE_COLUMNS,
    row_to_rule,
)


async def load_roles(conn: AsyncConnection, roles: list[Role]) -> list[Role]:
    """Fill the permissions of roles in declaration order."""
    if not roles:
        return roles
    by_id = {r.id: r for r in roles}
    cur = await conn.execute(
        f"SELECT pr.role_id, {RULE_COLUMNS} FROM permission p "
        "JOIN permission_role pr ON pr.permission_id = p.id "
        "WHERE pr.role_id = ANY(%s) ORDER BY pr.role_id, pr.position",
        (list(by_id),),
    )
    for r in await cur.fetchall():
        by_id[r[0]].permissions.append(row_to_rule(r[1:]))
    return roles


class PostgresRoleRepository:
    """Role repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, role_id: UUID) -> Role | None:
        """Get role with its rules."""
        cur = await self._conn.execute(
            "SELECT id, name FROM role WHERE id = %s",
            (role_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        roles = await load_roles(self._conn, [Role(id=r[0], name=r[1])])
        return roles[0]

    async def list_by_ids(self, role_ids: list[UUID]) -> list[Role]:
        """Get roles (without rules) by ids."""
        if not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT id, name FROM role WHERE id = ANY(%s) ORDER BY name",
            (role_ids,),
        )
        rows = await cur.fetchall()
        return [Role(id=r[0], name=r[1]) for r in rows]

    async def list_user_ids(self, role_id: UUID) -> list[str]:
        """Members of role."""
        cur = await self._conn.execute(
            "SELECT user_id FROM role_user WHERE role_id = %s",
            (role_id,),
        )
        rows = await cur.fetchall()
        return [str(r[0]) for r in rows]

    async def set_permissions(self, role_id: UUID, permission_ids: list[UUID]) -> None:
        """Replace the rules of role, keeping the given order."""
        await self._conn.execute(
            "DELETE FROM permission_role WHERE role_id = %s",
            (role_id,),
        )
        for position, permission_id in enumerate(permission_ids):
            await self._conn.execute(
                "INSERT INTO permission_role (permission_id, role_id, position) "
                "VALUES (%s, %s, %s)",
                (permission_id, role_id, position),
            )

    async def delete(self, role_id: UUID) -> None:
        """Delete role (memberships cascade)."""
        await self._conn.execute("DELETE FROM role WHERE id = %s", (role_id,))
