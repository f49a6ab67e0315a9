"""Publish one article to WordPress and reconcile the result."""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy.orm import Session

from db.models import Article, CmsConnection
from pipeline.reconcile import mark_published
from publishing.html import render_article_html
from publishing.wordpress import WordPressClient, WordPressPost, WordPressResponse

logger = logging.getLogger(__name__)

ClientFactory = Callable[[CmsConnection], WordPressClient]


@dataclass
class PublishResult:
    """Normalized outcome of a create or update call."""

    success: bool
    post_id: str | None = None
    url: str | None = None
    status: str | None = None
    action: str | None = None  # created, updated
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = {
                "post_id": self.post_id,
                "url": self.url,
                "status": self.status,
                "action": self.action,
            }
        else:
            body["error"] = self.error
        return body


def build_post_payload(
    title: str,
    content: str,
    excerpt: str | None,
    status: str,
    slug: str | None = None,
    categories: list[int] | None = None,
    tags: list[int] | None = None,
) -> WordPressPost:
    """Build the post body. Optional fields are only sent when present and well-formed.

    WordPress rejects empty slugs and empty term lists on some setups, so
    absent and empty are treated the same: the key is left out.
    """
    extra: dict[str, Any] = {}
    if isinstance(slug, str) and slug.strip():
        extra["slug"] = slug.strip()
    if isinstance(categories, list) and categories:
        extra["categories"] = categories
    if isinstance(tags, list) and tags:
        extra["tags"] = tags
    return WordPressPost(
        title=title,
        content=content,
        excerpt=excerpt or "",
        status=status,
        extra=extra,
    )


def _normalize(response: WordPressResponse, action: str, fallback_id: str | None, fallback_url: str | None) -> PublishResult:
    if not response.success:
        return PublishResult(success=False, action=action, error=response.error or f"Failed to {action[:-1]} WordPress post")

    data = response.data if isinstance(response.data, dict) else {}
    post_id = data.get("id", fallback_id)
    return PublishResult(
        success=True,
        post_id=str(post_id) if post_id is not None else None,
        url=data.get("link") or fallback_url,
        status=data.get("status"),
        action=action,
    )


def publish_article(
    session: Session,
    article: Article,
    connection: CmsConnection,
    status: str = "publish",
    categories: list[int] | None = None,
    tags: list[int] | None = None,
    client_factory: ClientFactory = WordPressClient.from_connection,
) -> PublishResult:
    """Render, push and (for live posts) reconcile a single article.

    Only a successful ``status == "publish"`` call is reconciled into the
    store; remote drafts leave the article's publish fields untouched.
    """
    client = client_factory(connection)

    html = render_article_html(article.content)
    html = client.process_content_images(html)

    post = build_post_payload(
        title=article.title or "",
        content=html,
        excerpt=article.meta_description,
        status=status,
        slug=article.slug,
        categories=categories,
        tags=tags,
    )

    if article.cms_post_id:
        logger.info("Updating existing WordPress post %s for article %d", article.cms_post_id, article.id)
        response = client.update_post(int(article.cms_post_id), post)
        result = _normalize(response, "updated", article.cms_post_id, article.published_url)
    else:
        logger.info("Creating WordPress post for article %d: %s", article.id, article.title)
        response = client.create_post(post)
        result = _normalize(response, "created", None, None)

    if not result.success:
        logger.error("WordPress publish failed for article %d: %s", article.id, result.error)
        return result

    if status == "publish" and result.post_id and result.url:
        mark_published(session, article, result.post_id, result.url)
    return result
