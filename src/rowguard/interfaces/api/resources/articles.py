"""Article API resources."""

from uuid import UUID

import falcon
import falcon.asgi

from rowguard.application.use_cases.article.get_article import GetArticleUseCase
from rowguard.application.use_cases.article.list_articles import ListArticlesUseCase
from rowguard.application.use_cases.article.update_article import UpdateArticleUseCase
from rowguard.domain.exceptions import NotFound, PermissionDenied, ValidationError
from rowguard.domain.value_objects import SubjectType
from rowguard.interfaces.api.hooks import can_read, can_update, check_policies
from rowguard.interfaces.api.resources.serialization import to_json


class ArticlesResource:
    """GET /v1/articles - paginated readable articles."""

    subject_type = SubjectType.ARTICLE

    def __init__(self, list_articles: ListArticlesUseCase) -> None:
        self._list_articles = list_articles

    @falcon.before(check_policies(can_read(SubjectType.ARTICLE)))
    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List articles. Query params: skip, take, status."""
        try:
            skip = req.get_param_as_int("skip", default=0)
            take = req.get_param_as_int("take", default=20)
        except falcon.HTTPInvalidParam as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": e.description}
            return

        try:
            result = await self._list_articles.execute(
                req.context.user.user_id,
                skip=skip,
                take=take,
                status=req.get_param("status"),
            )
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return
        resp.media = to_json(result)
        resp.status = falcon.HTTP_200


class ArticleResource:
    """GET/PATCH /v1/articles/{article_id}."""

    subject_type = SubjectType.ARTICLE

    def __init__(
        self,
        get_article: GetArticleUseCase,
        update_article: UpdateArticleUseCase,
    ) -> None:
        self._get_article = get_article
        self._update_article = update_article

    @falcon.before(check_policies(can_read(SubjectType.ARTICLE)))
    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        article_id: str,
    ) -> None:
        """Get article by id."""
        try:
            art_id = UUID(article_id)
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid UUID"}
            return

        try:
            result = await self._get_article.execute(req.context.user.user_id, art_id)
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Article not found"}
            return
        resp.media = to_json(result)
        resp.status = falcon.HTTP_200

    @falcon.before(check_policies(can_update(SubjectType.ARTICLE)))
    async def on_patch(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        article_id: str,
    ) -> None:
        """Update article fields."""
        try:
            art_id = UUID(article_id)
            body = await req.get_media()
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid UUID"}
            return
        if not isinstance(body, dict):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "JSON object required"}
            return

        try:
            result = await self._update_article.execute(
                req.context.user.user_id, art_id, body
            )
            resp.media = to_json(result)
            resp.status = falcon.HTTP_200
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Article not found"}
        except PermissionDenied as e:
            resp.status = falcon.HTTP_403
            resp.media = {"error": str(e)}
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
