"""Ability factory - compiles user roles or cached raw rules into an Ability."""

import logging
from dataclasses import fields as dataclass_fields
from typing import Any

from rowguard.domain.ability import ADMIN_RULE, Ability, Rule
from rowguard.domain.conditions import interpolate_conditions
from rowguard.domain.entities import PermissionRule, User
from rowguard.domain.exceptions import MalformedRules

logger = logging.getLogger(__name__)


def _user_context(user: User) -> dict[str, Any]:
    return {
        f.name: getattr(user, f.name)
        for f in dataclass_fields(user)
        if f.name != "roles"
    }


class AbilityFactory:
    """Builds abilities. Admins get a single ``manage all`` rule."""

    def create_for_user(self, user: User) -> Ability:
        """Compile all role rules of user in declaration order."""
        if user.is_admin:
            logger.debug("Creating admin ability for user %s", user.id)
            return Ability([ADMIN_RULE])

        permissions = [p for role in user.roles for p in role.permissions]
        logger.debug(
            "Creating ability for user %s with %d permissions", user.id, len(permissions)
        )
        context = _user_context(user)
        rules = [self._compile(p, context) for p in permissions]
        ability = Ability(rules)
        logger.debug("Built ability with %d rules for user %s", len(rules), user.id)
        return ability

    def create_from_rules(self, raw_rules: Any) -> Ability:
        """Rebuild an ability from cached raw rules. Raises MalformedRules."""
        if not isinstance(raw_rules, list):
            raise MalformedRules(f"cached rules must be a list, got {type(raw_rules).__name__}")
        logger.debug("Recreating ability from %d cached rules", len(raw_rules))
        return Ability(Rule.from_raw(r) for r in raw_rules)

    @staticmethod
    def _compile(permission: PermissionRule, context: dict[str, Any]) -> Rule:
        conditions = permission.conditions
        if conditions and context:
            conditions = interpolate_conditions(conditions, context)
        return Rule.create(
            action=permission.action,
            subject=permission.subject,
            fields=permission.fields,
            conditions=conditions,
            inverted=permission.inverted,
            reason=permission.reason,
        )
