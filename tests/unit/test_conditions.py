"""Unit tests for in-memory condition matching and user interpolation."""

from uuid import UUID

import pytest

from rowguard.domain.conditions import (
    UnsupportedCondition,
    interpolate_conditions,
    matches_conditions,
)


@pytest.mark.parametrize(
    ("conditions", "obj", "expected"),
    [
        ({"status": "published"}, {"status": "published"}, True),
        ({"status": "published"}, {"status": "draft"}, False),
        ({"status": None}, {"status": None}, True),
        ({"status": None}, {"status": "draft"}, False),
        ({"size": {"$gt": 10}}, {"size": 11}, True),
        ({"size": {"$gt": 10}}, {"size": 10}, False),
        ({"size": {"$gte": 10, "$lt": 20}}, {"size": 10}, True),
        ({"size": {"$lte": 10}}, {"size": None}, False),
        ({"status": {"$ne": "draft"}}, {"status": "published"}, True),
        ({"status": {"$ne": "draft"}}, {"status": None}, False),
        ({"status": {"$ne": None}}, {"status": "draft"}, True),
        ({"status": {"$in": ["a", "b"]}}, {"status": "b"}, True),
        ({"status": {"$in": ["a", "b"]}}, {"status": "c"}, False),
        ({"status": {"$in": []}}, {"status": "c"}, True),
        ({"status": "published", "author_id": "u1"}, {"status": "published", "author_id": "u2"}, False),
    ],
)
def test_matches_conditions(conditions, obj, expected) -> None:
    assert matches_conditions(conditions, obj) is expected


def test_matches_conditions_compares_uuid_as_string() -> None:
    value = UUID("12345678-1234-5678-1234-567812345678")
    assert matches_conditions({"id": str(value)}, {"id": value})


def test_incomparable_types_do_not_match() -> None:
    assert not matches_conditions({"size": {"$gt": 10}}, {"size": "big"})


def test_unknown_operator_raises() -> None:
    with pytest.raises(UnsupportedCondition):
        matches_conditions({"title": {"$regex": ".*"}}, {"title": "x"})


def test_in_requires_list() -> None:
    with pytest.raises(UnsupportedCondition):
        matches_conditions({"status": {"$in": "draft"}}, {"status": "draft"})


def test_in_rejects_null_member() -> None:
    with pytest.raises(UnsupportedCondition):
        matches_conditions({"status": {"$in": ["draft", None]}}, {"status": None})


def test_interpolate_user_attributes() -> None:
    conditions = {
        "author_id": "${user.id}",
        "status": {"$in": ["published", "${user.email}"]},
        "title": "literal ${user.id} text",
    }
    result = interpolate_conditions(conditions, {"id": "u1", "email": "a@b.c"})
    assert result == {
        "author_id": "u1",
        "status": {"$in": ["published", "a@b.c"]},
        "title": "literal ${user.id} text",
    }


def test_interpolate_unknown_attribute_left_literal() -> None:
    assert interpolate_conditions({"owner_id": "${user.nope}"}, {"id": "u1"}) == {
        "owner_id": "${user.nope}"
    }
