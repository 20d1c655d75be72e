"""Unit tests for PermissionFilteredRepository."""

from uuid import uuid4

import pytest

from rowguard.domain.exceptions import QueryConfigurationError, ValidationError
from rowguard.infrastructure.permission.filtered_repository import (
    PermissionFilteredRepository,
)
from rowguard.infrastructure.permission.permission_query_filter import DENY_ALL, PERMISSION_TAG
from rowguard.infrastructure.persistence.postgres.schema import ARTICLE

from tests.conftest import FakeStore, FakeUnitOfWork


@pytest.fixture
def article_rows(store: FakeStore) -> list[dict]:
    rows = [
        {"id": uuid4(), "title": "One", "content": "c1", "status": "published", "author_id": "u1"},
        {"id": uuid4(), "title": "Two", "content": "c2", "status": "published", "author_id": "u2"},
    ]
    for row in rows:
        store.articles[row["id"]] = row
    return rows


@pytest.fixture
def reader(store: FakeStore):
    rules = [
        store.add_rule("read", "Article", conditions={"status": "published"}),
        store.add_rule("read", "Article", fields=["content"], inverted=True),
    ]
    return store.add_user("u1", roles=[store.add_role("reader", rules)])


def _repo(query_filter, fake_uow: FakeUnitOfWork, user_id: str = "u1", action: str = "read"):
    return PermissionFilteredRepository(fake_uow.queries, ARTICLE, query_filter, user_id, action)


@pytest.mark.asyncio
async def test_find_applies_filter_before_execution(
    query_filter, fake_uow: FakeUnitOfWork, reader, article_rows
) -> None:
    items = await _repo(query_filter, fake_uow).find(
        {"author_id": "u1"}, skip=0, take=10, order={"created_at": "DESC"}
    )

    assert len(items) == 2
    assert all("content" not in item for item in items)
    statement, params = fake_uow.queries.queries[0].build()
    text = statement.as_string()
    assert '("article"."author_id" = %s) AND ("article"."status" = %s)' in text
    assert 'ORDER BY "article"."created_at" DESC' in text
    assert params == ["u1", "published", 10, 0]


@pytest.mark.asyncio
async def test_find_and_count_uses_same_filtered_query(
    query_filter, fake_uow: FakeUnitOfWork, reader, article_rows
) -> None:
    items, total = await _repo(query_filter, fake_uow).find_and_count(take=1)

    assert total == 2
    count_sql, count_params = fake_uow.queries.queries[-1].build_count()
    assert "count(DISTINCT" in count_sql.as_string()
    assert count_params == ["published"]


@pytest.mark.asyncio
async def test_find_one_for_user_without_rules_returns_none(
    query_filter, fake_uow: FakeUnitOfWork, store: FakeStore, article_rows
) -> None:
    store.add_user("nobody")
    assert await _repo(query_filter, fake_uow, "nobody").find_one() is None


@pytest.mark.asyncio
async def test_find_one_with_relation(
    query_filter, fake_uow: FakeUnitOfWork, reader, article_rows
) -> None:
    await _repo(query_filter, fake_uow).find_one(
        {"id": article_rows[0]["id"]}, relations=["author"]
    )
    query = fake_uow.queries.queries[0]
    assert [j.alias for j in query.joins] == ["author"]
    assert query.selected("author") == ["id"]


@pytest.mark.asyncio
async def test_create_query_is_prefiltered(
    query_filter, fake_uow: FakeUnitOfWork, reader
) -> None:
    query = await _repo(query_filter, fake_uow).create_query("art")
    assert query.alias == "art"
    assert query.predicate_for(PERMISSION_TAG) is not None


@pytest.mark.asyncio
async def test_unknown_where_column_rejected(
    query_filter, fake_uow: FakeUnitOfWork, reader
) -> None:
    with pytest.raises(ValidationError):
        await _repo(query_filter, fake_uow).find({"password": "x"})


@pytest.mark.asyncio
async def test_factory_rejects_subject_without_metadata(repositories, fake_uow) -> None:
    with pytest.raises(QueryConfigurationError):
        repositories(fake_uow.queries, "Files", "u1", "read")


@pytest.mark.asyncio
async def test_filter_on_unreadable_column_returns_no_rows(
    query_filter, fake_uow: FakeUnitOfWork, store: FakeStore, article_rows
) -> None:
    rule = store.add_rule("read", "Article", fields=["title"])
    store.add_user("limited", roles=[store.add_role("limited", [rule])])
    repo = _repo(query_filter, fake_uow, "limited")

    items, total = await repo.find_and_count({"status": "published"})

    assert (items, total) == ([], 0)
    query = fake_uow.queries.queries[0]
    assert query.predicate_for(PERMISSION_TAG)[0] is DENY_ALL
    assert query.selected("article") == ["id"]


@pytest.mark.asyncio
async def test_filter_on_denied_field_returns_no_rows(
    query_filter, fake_uow: FakeUnitOfWork, reader, article_rows
) -> None:
    assert await _repo(query_filter, fake_uow).find({"content": "c1"}) == []
    assert await _repo(query_filter, fake_uow).find_one({"id": article_rows[0]["id"]}) is not None
