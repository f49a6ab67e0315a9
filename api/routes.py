"""API routes for seo-autopilot: health, publish, generate, connection test."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from api.auth import require_cron_secret
from api.deps import get_article_generator, get_wordpress_client_factory
from db.database import get_session
from db.models import Article, CmsConnection
from generation.generator import ArticleGenerator, generate_for_article
from generation.llm import GenerationError
from pipeline.reconcile import WORDPRESS
from publishing.service import ClientFactory, publish_article

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class PublishRequest(BaseModel):
    connection_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("connectionId", "connection_id", "integrationId", "integration_id"),
    )
    status: str = "draft"
    categories: list[int] | None = None
    tags: list[int] | None = None


class GenerateArticleRequest(BaseModel):
    project_id: int | None = Field(default=None, validation_alias=AliasChoices("projectId", "project_id"))
    article_id: int | None = Field(default=None, validation_alias=AliasChoices("articleId", "article_id"))
    keyword: str | None = None
    content_type: str | None = Field(default=None, validation_alias=AliasChoices("contentType", "content_type"))


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _credentials_complete(connection: CmsConnection) -> bool:
    return bool(connection.api_url and connection.api_key and connection.api_secret)


@router.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok", "service": "seo-autopilot"}


@router.post(
    "/articles/{article_id}/publish",
    response_model=None,
    dependencies=[Depends(require_cron_secret)],
)
def publish(
    article_id: int,
    body: PublishRequest,
    client_factory: ClientFactory = Depends(get_wordpress_client_factory),
) -> dict[str, Any] | JSONResponse:
    """Create or update the article's WordPress post.

    With ``status == "publish"`` a successful call is reconciled into the
    article (published, post id, URL, timestamp).
    """
    if body.connection_id is None:
        return _error(400, "Connection ID is required")

    session = get_session()
    try:
        article = session.get(Article, article_id)
        if article is None:
            return _error(404, "Article not found")

        connection = session.get(CmsConnection, body.connection_id)
        if connection is None or connection.project_id != article.project_id:
            return _error(404, "Integration not found")
        if connection.platform != WORDPRESS:
            return _error(400, "Only WordPress integrations are supported")
        if not _credentials_complete(connection):
            return _error(400, "WordPress credentials not configured")

        result = publish_article(
            session,
            article,
            connection,
            status=body.status,
            categories=body.categories,
            tags=body.tags,
            client_factory=client_factory,
        )
        if not result.success:
            return JSONResponse(status_code=400, content=result.to_dict())
        return result.to_dict()
    except Exception as e:
        session.rollback()
        logger.exception("Error publishing article %d", article_id)
        return _error(500, str(e) or "Failed to publish article")
    finally:
        session.close()


@router.post("/generate-article", response_model=None, dependencies=[Depends(require_cron_secret)])
def generate_article(
    body: GenerateArticleRequest,
    generator: ArticleGenerator = Depends(get_article_generator),
) -> dict[str, Any] | JSONResponse:
    """Generate content for an existing article and save it."""
    if body.project_id is None or body.article_id is None:
        return _error(400, "projectId and articleId are required")

    session = get_session()
    try:
        generated = generate_for_article(
            session, generator, body.project_id, body.article_id, body.keyword, body.content_type
        )
        return {"success": True, "title": generated.title, "content": generated.content}
    except LookupError as e:
        return _error(404, str(e))
    except GenerationError as e:
        session.rollback()
        logger.error("Generation failed for article %d: %s", body.article_id, e)
        return _error(500, str(e))
    finally:
        session.close()


@router.post(
    "/integrations/{connection_id}/test",
    response_model=None,
    dependencies=[Depends(require_cron_secret)],
)
def check_integration(
    connection_id: int,
    client_factory: ClientFactory = Depends(get_wordpress_client_factory),
) -> dict[str, Any] | JSONResponse:
    """Check the stored WordPress credentials and activate the connection on success."""
    session = get_session()
    try:
        connection = session.get(CmsConnection, connection_id)
        if connection is None:
            return _error(404, "Integration not found")
        if connection.platform != WORDPRESS:
            return _error(400, "Only WordPress integrations are supported")
        if not _credentials_complete(connection):
            return _error(400, "Missing WordPress credentials")

        result = client_factory(connection).test_connection()
        if not result.success:
            return _error(400, result.error or "Connection test failed")

        connection.status = "active"
        connection.last_tested_at = datetime.utcnow()
        session.commit()
        return {"success": True, "data": result.data}
    finally:
        session.close()
