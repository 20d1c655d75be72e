"""Update permission rule use case."""

from dataclasses import replace
from typing import Any
from uuid import UUID

from rowguard.application.ports import AbilityProvider
from rowguard.application.use_cases.authorization import require
from rowguard.domain.ability import Rule
from rowguard.domain.entities import PermissionRule
from rowguard.domain.exceptions import MalformedRules, NotFound, ValidationError
from rowguard.domain.value_objects import Action, SubjectType

UPDATABLE_FIELDS = frozenset(
    {"action", "subject", "fields", "conditions", "inverted", "reason"}
)


class UpdatePermissionUseCase:
    """Change a rule; every user holding it through a role is invalidated."""

    def __init__(
        self,
        unit_of_work_factory: type,
        abilities: AbilityProvider,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._abilities = abilities

    async def execute(
        self, actor_id: str, permission_id: UUID, changes: dict[str, Any]
    ) -> PermissionRule:
        """Apply changes to the rule. Raises ValidationError for malformed rules."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown permission fields: {sorted(unknown)}")
        await require(self._abilities, actor_id, Action.UPDATE, SubjectType.PERMISSION)

        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_by_id(permission_id)
            if not permission:
                raise NotFound("Permission", str(permission_id))
            await require(self._abilities, actor_id, Action.UPDATE, permission)

            updated = replace(permission, **changes)
            try:
                Rule.create(
                    action=updated.action,
                    subject=updated.subject,
                    fields=updated.fields,
                    conditions=updated.conditions,
                    inverted=updated.inverted,
                    reason=updated.reason,
                )
            except MalformedRules as e:
                raise ValidationError(str(e)) from e

            await uow.permissions.update(updated)
            holders = await uow.permissions.list_user_ids(permission_id)

        await self._abilities.invalidate_many(holders)
        return updated
