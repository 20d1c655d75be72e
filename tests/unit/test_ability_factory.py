"""Unit tests for AbilityFactory."""

import pytest

from rowguard.domain.ability import ADMIN_RULE
from rowguard.domain.entities import Article
from rowguard.domain.exceptions import MalformedRules
from rowguard.infrastructure.permission.ability_factory import AbilityFactory

from tests.conftest import FakeStore


@pytest.fixture
def factory() -> AbilityFactory:
    return AbilityFactory()


def test_admin_gets_single_manage_all_rule(factory: AbilityFactory, store: FakeStore) -> None:
    """Admin flag short-circuits whatever roles say."""
    deny = store.add_rule("read", "Article", inverted=True)
    user = store.add_user("admin", roles=[store.add_role("r", [deny])], is_admin=True)

    ability = factory.create_for_user(user)

    assert ability.rules == (ADMIN_RULE,)
    assert ability.can("read", "Article")


def test_user_without_roles_gets_nothing(factory: AbilityFactory, store: FakeStore) -> None:
    ability = factory.create_for_user(store.add_user("u1"))
    assert ability.rules == ()
    assert ability.cannot("read", "Article")


def test_rules_compiled_in_role_declaration_order(
    factory: AbilityFactory, store: FakeStore
) -> None:
    r1 = store.add_rule("read", "Article")
    r2 = store.add_rule("read", "Article", fields=["content"], inverted=True)
    r3 = store.add_rule("update", "Article", fields=["title"])
    user = store.add_user(
        "u1", roles=[store.add_role("a", [r1, r2]), store.add_role("b", [r3])]
    )

    ability = factory.create_for_user(user)

    assert [(r.action, r.inverted) for r in ability.rules] == [
        ("read", False),
        ("read", True),
        ("update", False),
    ]
    assert ability.cannot("read", "Article", "content")


def test_user_placeholders_interpolated(factory: AbilityFactory, store: FakeStore) -> None:
    rule = store.add_rule("update", "Article", conditions={"author_id": "${user.id}"})
    user = store.add_user("u1", roles=[store.add_role("author", [rule])])

    ability = factory.create_for_user(user)

    assert ability.rules[0].conditions == {"author_id": "u1"}
    assert ability.can("update", Article(id=rule.id, title="t", author_id="u1"))
    assert ability.cannot("update", Article(id=rule.id, title="t", author_id="u2"))


def test_create_from_rules_rebuilds_equal_ability(
    factory: AbilityFactory, store: FakeStore
) -> None:
    rule = store.add_rule("read", "Article", conditions={"status": "published"})
    ability = factory.create_for_user(store.add_user("u1", roles=[store.add_role("r", [rule])]))

    rebuilt = factory.create_from_rules(ability.to_raw())

    assert rebuilt.rules == ability.rules


@pytest.mark.parametrize("raw", [None, {"rules": []}, "[]", [{"subject": "Article"}]])
def test_create_from_rules_rejects_malformed(factory: AbilityFactory, raw) -> None:
    with pytest.raises(MalformedRules):
        factory.create_from_rules(raw)
