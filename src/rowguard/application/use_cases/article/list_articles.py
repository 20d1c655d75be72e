"""List articles use case."""

from typing import Any

from rowguard.application.ports import FilteredRepositoryFactory
from rowguard.domain.exceptions import ValidationError
from rowguard.domain.value_objects import Action, SubjectType

MAX_PAGE_SIZE = 100


class ListArticlesUseCase:
    """Paginated articles the user may read, with their authors."""

    def __init__(
        self,
        unit_of_work_factory: type,
        repositories: FilteredRepositoryFactory,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._repositories = repositories

    async def execute(
        self,
        user_id: str,
        skip: int = 0,
        take: int = 20,
        status: str | None = None,
    ) -> dict[str, Any]:
        """Return ``{"items": [...], "total": n}``; total counts readable rows only."""
        if skip < 0 or not 0 < take <= MAX_PAGE_SIZE:
            raise ValidationError(f"skip must be >= 0 and take in 1..{MAX_PAGE_SIZE}")
        where = {"status": status} if status else None

        async with self._uow_factory() as uow:
            articles = self._repositories(
                uow.queries, SubjectType.ARTICLE, user_id, Action.READ
            )
            items, total = await articles.find_and_count(
                where,
                skip=skip,
                take=take,
                order={"created_at": "DESC"},
                relations=["author"],
            )
        return {"items": items, "total": total}
