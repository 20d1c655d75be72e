"""Update user roles use case."""

from uuid import UUID

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.entities import User
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType


class UpdateUserRolesUseCase:
    """Replace the roles of a user and drop their cached ability."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(self, actor_id: str, user_id: str, role_ids: list[UUID]) -> User:
        """Assign exactly role_ids to user. Actor must be able to update the user."""
        await require(self._abilities, actor_id, Action.UPDATE, SubjectType.USER)
        role_ids = list(dict.fromkeys(role_ids))

        async with self._uow_factory() as uow:
            user = await uow.users.get_with_roles(user_id)
            if not user:
                raise NotFound("User", user_id)
            await require(self._abilities, actor_id, Action.UPDATE, user)

            roles = await uow.roles.list_by_ids(role_ids)
            missing = set(role_ids) - {r.id for r in roles}
            if missing:
                raise NotFound("Role", ", ".join(sorted(str(m) for m in missing)))

            await uow.users.set_roles(user_id, role_ids)
            user.roles = roles

        await self._abilities.invalidate(user_id)
        return user
