"""PostgreSQL permission rule repository implementation."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from rowguard.domain.entities import PermissionRule

RULE_COLUMNS = (
    "p.id, p.action, p.subject, p.fields, p.conditions, p.inverted, p.reason, "
    "p.created_at, p.updated_at"
)


def row_to_rule(r: Sequence[Any]) -> PermissionRule:
    """Map a row selected with RULE_COLUMNS."""
    return PermissionRule(
        id=r[0],
        action=r[1],
        subject=r[2],
        fields=r[3],
        conditions=r[4],
        inverted=r[5],
        reason=r[6] or "",
        created_at=r[7],
        updated_at=r[8],
    )


class PostgresPermissionRepository:
    """Permission rule repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, permission_id: UUID) -> PermissionRule | None:
        """Get rule by id."""
        cur = await self._conn.execute(
            f"SELECT {RULE_COLUMNS} FROM permission p WHERE p.id = %s",
            (permission_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return row_to_rule(r)

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[PermissionRule]:
        """Get rules by ids, in the given order."""
        if not permission_ids:
            return []
        cur = await self._conn.execute(
            f"SELECT {RULE_COLUMNS} FROM permission p WHERE p.id = ANY(%s)",
            (permission_ids,),
        )
        by_id = {r.id: r for r in map(row_to_rule, await cur.fetchall())}
        return [by_id[i] for i in permission_ids if i in by_id]

    async def list_user_ids(self, permission_id: UUID) -> list[str]:
        """Users holding the rule through any of their roles."""
        cur = await self._conn.execute(
            "SELECT DISTINCT ru.user_id FROM role_user ru "
            "JOIN permission_role pr ON pr.role_id = ru.role_id "
            "WHERE pr.permission_id = %s",
            (permission_id,),
        )
        rows = await cur.fetchall()
        return [str(r[0]) for r in rows]

    async def update(self, permission: PermissionRule) -> None:
        """Update rule."""
        await self._conn.execute(
            "UPDATE permission SET action=%s, subject=%s, fields=%s, conditions=%s, "
            "inverted=%s, reason=%s, updated_at=now() WHERE id=%s",
            (
                permission.action,
                permission.subject,
                Jsonb(permission.fields) if permission.fields is not None else None,
                Jsonb(permission.conditions) if permission.conditions is not None else None,
                permission.inverted,
                permission.reason,
                permission.id,
            ),
        )

    async def delete(self, permission_id: UUID) -> None:
        """Delete rule."""
        await self._conn.execute(
            "DELETE FROM permission WHERE id = %s",
            (permission_id,),
        )
