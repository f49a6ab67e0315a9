"""Auto-publish run: publish every due scheduled article.

Articles are handled one at a time. Per article the outcome is one of:

- published: the publish call succeeded, publish fields reconciled;
- draft: the project has no active WordPress connection (needs a human);
- unchanged (still scheduled): the publish call failed or raised. The next
  run scans the article again, so failed publishes are retried by re-scan
  with no attempt limit and no backoff.

Overlapping runs are not coordinated; two runs that scan the same due
article can both publish it.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from db.models import Article
from pipeline.gateways import PublishGateway
from pipeline.reconcile import find_active_connection, mark_draft, mark_published
from pipeline.scanner import find_due_articles

logger = logging.getLogger(__name__)

NO_CONNECTION_ERROR = "No active WordPress integration"


def publish_due_article(
    session: Session,
    gateway: PublishGateway,
    article: Article,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Publish one due article and reconcile. Returns its result entry."""
    now = now or datetime.utcnow()
    result: dict[str, Any] = {"articleId": article.id, "title": article.title}
    logger.info("Processing article %d: %s (scheduled %s)", article.id, article.title, article.scheduled_at)

    try:
        connection = find_active_connection(session, article.project_id)
        if connection is None:
            logger.warning("No active WordPress integration for project %d", article.project_id)
            mark_draft(session, article, now)
            return {**result, "status": "failed", "error": NO_CONNECTION_ERROR}

        outcome = gateway.publish(article.id, connection.id, status="publish")
        if not outcome.success:
            logger.error("Failed to publish article %d: %s", article.id, outcome.error)
            return {**result, "status": "failed", "error": outcome.error or "Unknown error"}

        mark_published(session, article, outcome.post_id, outcome.url, now)
        return {
            **result,
            "status": "success",
            "wordpressPostId": outcome.post_id,
            "publishedUrl": outcome.url,
        }
    except Exception as e:
        session.rollback()
        logger.exception("Error publishing article %d", result["articleId"])
        return {**result, "status": "error", "error": str(e) or e.__class__.__name__}


def publish_if_connected(session: Session, gateway: PublishGateway, article: Article) -> bool:
    """Best-effort immediate publish used after generation. Never raises."""
    try:
        connection = find_active_connection(session, article.project_id)
        if connection is None:
            logger.info("No WordPress integration for project %d, skipping publish", article.project_id)
            return False
        outcome = gateway.publish(article.id, connection.id, status="publish")
        if not outcome.success:
            logger.error("Failed to publish article %d: %s", article.id, outcome.error)
            return False
        mark_published(session, article, outcome.post_id, outcome.url)
        return True
    except Exception:
        session.rollback()
        logger.exception("Error publishing article %d", article.id)
        return False


def run_auto_publish(session: Session, gateway: PublishGateway, now: datetime | None = None) -> dict[str, Any]:
    """Scan, publish and reconcile all due articles. A failed scan raises."""
    now = now or datetime.utcnow()
    logger.info("=== Auto-publish run started at %s ===", now.isoformat())

    due = find_due_articles(session, now)
    if not due:
        logger.info("No articles scheduled for publishing at this time")
        return {
            "success": True,
            "message": "No articles to publish",
            "published": 0,
            "failed": 0,
            "results": [],
        }

    logger.info("Found %d article(s) ready to publish", len(due))
    results = [publish_due_article(session, gateway, article, now) for article in due]

    published = sum(1 for r in results if r["status"] == "success")
    failed = len(results) - published
    logger.info("=== Auto-publish run done: %d published, %d failed ===", published, failed)
    return {
        "success": True,
        "message": f"Published {published} of {len(results)} scheduled articles",
        "published": published,
        "failed": failed,
        "results": results,
    }
