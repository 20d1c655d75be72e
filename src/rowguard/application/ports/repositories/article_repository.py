"""Article repository port - writes; reads go through the permission filter."""

from typing import Any, Protocol
from uuid import UUID


class ArticleRepository(Protocol):
    """Port for article writes."""

    async def update(self, article_id: UUID, changes: dict[str, Any]) -> None: ...
