"""Delete permission rule use case."""

from uuid import UUID

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType


class DeletePermissionUseCase:
    """Delete a rule; every user who held it is invalidated."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(self, actor_id: str, permission_id: UUID) -> None:
        await require(self._abilities, actor_id, Action.DELETE, SubjectType.PERMISSION)

        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_by_id(permission_id)
            if not permission:
                raise NotFound("Permission", str(permission_id))
            await require(self._abilities, actor_id, Action.DELETE, permission)
            holders = await uow.permissions.list_user_ids(permission_id)
            await uow.permissions.delete(permission_id)

        await self._abilities.invalidate_many(holders)
