"""Delete role use case."""

from uuid import UUID

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType


class DeleteRoleUseCase:
    """Delete a role; its former members' cached abilities are dropped."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(self, actor_id: str, role_id: UUID) -> None:
        await require(self._abilities, actor_id, Action.DELETE, SubjectType.ROLE)

        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            await require(self._abilities, actor_id, Action.DELETE, role)
            # Memberships cascade, so collect them first
            members = await uow.roles.list_user_ids(role_id)
            await uow.roles.delete(role_id)

        await self._abilities.invalidate_many(members)
