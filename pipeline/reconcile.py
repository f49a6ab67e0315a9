"""Store-side reconciliation of publish outcomes.

``published_url``, ``cms_post_id`` and ``published_at`` are non-null exactly
when ``status == published``; the helpers here are the only writers of those
fields and set them together.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from db.models import Article, ArticleStatus, CmsConnection

logger = logging.getLogger(__name__)

WORDPRESS = "wordpress"


def find_active_connection(session: Session, project_id: int, platform: str = WORDPRESS) -> CmsConnection | None:
    """The project's active connection for ``platform``, if any."""
    return (
        session.query(CmsConnection)
        .filter(
            CmsConnection.project_id == project_id,
            CmsConnection.platform == platform,
            CmsConnection.status == "active",
        )
        .order_by(CmsConnection.id)
        .first()
    )


def mark_published(
    session: Session,
    article: Article,
    post_id: str | int,
    url: str,
    now: datetime | None = None,
) -> None:
    """Record a successful publish. All publish fields are written in one commit.

    Raises ValueError when the post id or URL is missing.
    """
    if post_id is None or post_id == "" or not url:
        raise ValueError(f"Article {article.id} cannot be marked published without a post id and URL")
    now = now or datetime.utcnow()
    article.status = ArticleStatus.PUBLISHED
    article.cms_post_id = str(post_id)
    article.published_url = url
    article.published_at = now
    article.updated_at = now
    session.commit()
    logger.info("Article %d marked published (post %s, %s)", article.id, post_id, url)


def mark_draft(session: Session, article: Article, now: datetime | None = None) -> None:
    """De-schedule an article; it needs manual action to be scheduled again."""
    article.status = ArticleStatus.DRAFT
    article.updated_at = now or datetime.utcnow()
    session.commit()
    logger.info("Article %d moved back to draft", article.id)
