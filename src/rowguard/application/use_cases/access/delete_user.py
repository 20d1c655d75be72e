"""Delete user use case."""

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType


class DeleteUserUseCase:
    """Delete a user and drop their cached ability."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(self, actor_id: str, user_id: str) -> None:
        await require(self._abilities, actor_id, Action.DELETE, SubjectType.USER)

        async with self._uow_factory() as uow:
            user = await uow.users.get_with_roles(user_id)
            if not user:
                raise NotFound("User", user_id)
            await require(self._abilities, actor_id, Action.DELETE, user)
            await uow.users.delete(user_id)

        await self._abilities.invalidate(user_id)
