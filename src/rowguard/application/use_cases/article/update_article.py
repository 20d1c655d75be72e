"""Update article use case."""

from dataclasses import fields as dataclass_fields
from typing import Any
from uuid import UUID

from rowguard.application.ports import FilteredRepositoryFactory
from rowguard.domain.entities import Article
from rowguard.domain.exceptions import NotFound, PermissionDenied, ValidationError
from rowguard.domain.value_objects import Action, SubjectType

_ARTICLE_FIELDS = frozenset(f.name for f in dataclass_fields(Article))


class UpdateArticleUseCase:
    """Update an article within the user's ``update`` rows and fields."""

    def __init__(
        self,
        unit_of_work_factory: type,
        repositories: FilteredRepositoryFactory,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._repositories = repositories

    async def execute(
        self, user_id: str, article_id: UUID, changes: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply changes and return the updated article.

        The filtered ``update`` query returns only rows and columns the user may
        update, so a changed field missing from the row is not updatable.
        """
        if not changes:
            raise ValidationError("No changes given")
        unknown = set(changes) - _ARTICLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown article fields: {sorted(unknown)}")

        async with self._uow_factory() as uow:
            articles = self._repositories(
                uow.queries, SubjectType.ARTICLE, user_id, Action.UPDATE
            )
            article = await articles.find_one({"id": article_id})
            if not article:
                raise NotFound("Article", str(article_id))
            denied = sorted(f for f in changes if f not in article)
            if denied:
                raise PermissionDenied(f"User cannot update article fields: {denied}")
            await uow.articles.update(article_id, changes)

        return {**article, **changes}
