"""How the pipelines reach the publish and generate routines.

The HTTP gateways call this service's own endpoints (``APP_URL``) with the
cron bearer secret, so each publish or generation runs in its own request.
The local gateways run the same code in-process with a fresh session.
Both are plain objects handed to the pipeline functions, so tests pass fakes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import requests
from sqlalchemy.orm import Session

from config import APP_URL, CRON_SECRET, HTTP_TIMEOUT
from db.database import get_session
from db.models import Article, CmsConnection
from generation.generator import ArticleGenerator, generate_for_article
from generation.llm import GenerationError
from publishing.service import ClientFactory, publish_article
from publishing.wordpress import WordPressClient

logger = logging.getLogger(__name__)


@dataclass
class PublishOutcome:
    success: bool
    post_id: str | None = None
    url: str | None = None
    error: str | None = None


@dataclass
class GenerationOutcome:
    success: bool
    error: str | None = None


class PublishGateway(Protocol):
    def publish(self, article_id: int, connection_id: int, status: str = "publish") -> PublishOutcome: ...


class GenerationGateway(Protocol):
    def generate(
        self,
        project_id: int,
        article_id: int,
        keyword: str | None = None,
        content_type: str | None = None,
    ) -> GenerationOutcome: ...


MISSING_POST_ERROR = "Publish response is missing the post id or URL"


def completed_publish(post_id: Any, url: str | None) -> PublishOutcome:
    """A success only when the CMS returned both a post id and a URL."""
    if post_id is None or post_id == "" or not url:
        return PublishOutcome(success=False, error=MISSING_POST_ERROR)
    return PublishOutcome(success=True, post_id=str(post_id), url=url)


def parse_publish_response(ok: bool, body: Any) -> PublishOutcome:
    """Read ``{success, data: {post_id|id, url|link}, error}`` from the publish endpoint."""
    body = body if isinstance(body, dict) else {}
    if not (ok and body.get("success")):
        return PublishOutcome(success=False, error=body.get("error") or body.get("detail") or "Unknown error")

    data = body.get("data") or {}
    post_id = data.get("post_id", data.get("id"))
    url = data.get("url") or data.get("link")
    return completed_publish(post_id, url)


class _HttpGateway:
    def __init__(
        self,
        base_url: str = APP_URL,
        secret: str = CRON_SECRET,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Authorization": f"Bearer {secret}"}

    def _post(self, path: str, payload: dict[str, Any]) -> requests.Response:
        return self._session.post(
            f"{self.base_url}{path}",
            json=payload,
            headers=self._headers,
            timeout=self.timeout,
        )


class HttpPublishGateway(_HttpGateway):
    """POST /api/articles/{id}/publish. Network errors and non-JSON bodies raise."""

    def publish(self, article_id: int, connection_id: int, status: str = "publish") -> PublishOutcome:
        resp = self._post(
            f"/api/articles/{article_id}/publish",
            {"connectionId": connection_id, "status": status},
        )
        return parse_publish_response(resp.ok, resp.json())


class HttpGenerationGateway(_HttpGateway):
    """POST /api/generate-article. Network errors raise."""

    def generate(
        self,
        project_id: int,
        article_id: int,
        keyword: str | None = None,
        content_type: str | None = None,
    ) -> GenerationOutcome:
        resp = self._post(
            "/api/generate-article",
            {
                "projectId": project_id,
                "articleId": article_id,
                "keyword": keyword,
                "contentType": content_type,
            },
        )
        if resp.ok:
            return GenerationOutcome(success=True)
        try:
            error = resp.json().get("error")
        except ValueError:
            error = None
        return GenerationOutcome(success=False, error=error or f"HTTP {resp.status_code}")


class LocalPublishGateway:
    def __init__(
        self,
        session_factory: Callable[[], Session] = get_session,
        client_factory: ClientFactory = WordPressClient.from_connection,
    ) -> None:
        self._session_factory = session_factory
        self._client_factory = client_factory

    def publish(self, article_id: int, connection_id: int, status: str = "publish") -> PublishOutcome:
        session = self._session_factory()
        try:
            article = session.get(Article, article_id)
            connection = session.get(CmsConnection, connection_id)
            if article is None or connection is None:
                return PublishOutcome(success=False, error="Article or connection not found")
            result = publish_article(session, article, connection, status=status, client_factory=self._client_factory)
            if not result.success:
                return PublishOutcome(success=False, error=result.error)
            return completed_publish(result.post_id, result.url)
        finally:
            session.close()


class LocalGenerationGateway:
    def __init__(
        self,
        session_factory: Callable[[], Session] = get_session,
        generator_factory: Callable[[], ArticleGenerator] = ArticleGenerator.from_config,
    ) -> None:
        self._session_factory = session_factory
        self._generator_factory = generator_factory

    def generate(
        self,
        project_id: int,
        article_id: int,
        keyword: str | None = None,
        content_type: str | None = None,
    ) -> GenerationOutcome:
        session = self._session_factory()
        try:
            generate_for_article(session, self._generator_factory(), project_id, article_id, keyword, content_type)
            return GenerationOutcome(success=True)
        except (LookupError, GenerationError) as e:
            session.rollback()
            return GenerationOutcome(success=False, error=str(e))
        finally:
            session.close()
