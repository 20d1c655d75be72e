"""Get article use case."""

from typing import Any
from uuid import UUID

from rowguard.application.ports import FilteredRepositoryFactory
from rowguard.domain.exceptions import NotFound
from rowguard.domain.value_objects import Action, SubjectType


class GetArticleUseCase:
    """Get one article if the user may read it."""

    def __init__(
        self,
        unit_of_work_factory: type,
        repositories: FilteredRepositoryFactory,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._repositories = repositories

    async def execute(self, user_id: str, article_id: UUID) -> dict[str, Any]:
        """Unreadable and missing articles are both NotFound."""
        async with self._uow_factory() as uow:
            articles = self._repositories(
                uow.queries, SubjectType.ARTICLE, user_id, Action.READ
            )
            article = await articles.find_one({"id": article_id}, relations=["author"])
        if not article:
            raise NotFound("Article", str(article_id))
        return article
