"""Update role permissions use case."""

import logging
from uuid import UUID

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.entities import Role
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType

logger = logging.getLogger(__name__)


class UpdateRolePermissionsUseCase:
    """Replace the rules of a role; every member's cached ability is dropped."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(
        self, actor_id: str, role_id: UUID, permission_ids: list[UUID]
    ) -> Role:
        """Set the role's rules to permission_ids, in that order."""
        await require(self._abilities, actor_id, Action.UPDATE, SubjectType.ROLE)
        permission_ids = list(dict.fromkeys(permission_ids))

        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            await require(self._abilities, actor_id, Action.UPDATE, role)

            permissions = await uow.permissions.list_by_ids(permission_ids)
            missing = set(permission_ids) - {p.id for p in permissions}
            if missing:
                raise NotFound("Permission", ", ".join(sorted(str(m) for m in missing)))

            await uow.roles.set_permissions(role_id, permission_ids)
            role.permissions = permissions
            members = await uow.roles.list_user_ids(role_id)

        logger.debug("Role %s changed, invalidating %d users", role_id, len(members))
        await self._abilities.invalidate_many(members)
        return role
