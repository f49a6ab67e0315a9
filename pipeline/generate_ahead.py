"""Generation-ahead run: write tomorrow's scheduled articles in advance.

Each article gets a bounded number of generation attempts with linear
backoff. Exhausting them appends one GenerationLog row and the run moves on.
Publish failures, by contrast, have no retry limit: auto-publish re-scans
them on every run.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import GENERATION_BACKOFF_SECONDS, GENERATION_MAX_ATTEMPTS
from db.models import Article, GenerationLog, Project
from pipeline.auto_publish import publish_if_connected
from pipeline.gateways import GenerationGateway, PublishGateway
from pipeline.scanner import find_auto_generate_projects, find_scheduled_between, tomorrow_window

logger = logging.getLogger(__name__)


@dataclass
class RetryOutcome:
    success: bool
    attempts: int
    error: str | None = None


def generate_with_retry(
    gateway: GenerationGateway,
    article: Article,
    max_attempts: int = GENERATION_MAX_ATTEMPTS,
    backoff: float = GENERATION_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome:
    """Try to generate ``article`` up to ``max_attempts`` times.

    After failed attempt ``n`` (except the last) waits ``n * backoff`` seconds.
    Both reported failures and raised exceptions count as failed attempts.
    """
    last_error: str | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            outcome = gateway.generate(article.project_id, article.id, article.keyword, article.content_type)
            if outcome.success:
                logger.info("Generated article %d on attempt %d", article.id, attempt)
                return RetryOutcome(success=True, attempts=attempt)
            last_error = outcome.error or "Unknown error"
        except Exception as e:
            last_error = str(e) or e.__class__.__name__

        logger.warning("Attempt %d/%d failed for article %d: %s", attempt, max_attempts, article.id, last_error)
        if attempt < max_attempts:
            sleep(attempt * backoff)

    return RetryOutcome(success=False, attempts=max_attempts, error=last_error)


def _log_failure(session: Session, article: Article, outcome: RetryOutcome) -> None:
    session.add(
        GenerationLog(
            project_id=article.project_id,
            article_id=article.id,
            status="failed",
            error=outcome.error,
            attempts=outcome.attempts,
        )
    )
    session.commit()


def _process_project(
    session: Session,
    project: Project,
    generation_gateway: GenerationGateway,
    publish_gateway: PublishGateway,
    window: tuple[datetime, datetime],
    stats: dict[str, int],
    sleep: Callable[[float], None],
    max_attempts: int,
    backoff: float,
) -> None:
    articles = find_scheduled_between(session, project.id, *window)
    if not articles:
        logger.info("Project %d: nothing scheduled for tomorrow", project.id)
        return

    auto_publish = bool(project.settings and project.settings.auto_publish)
    for article in articles:
        stats["processed"] += 1
        outcome = generate_with_retry(generation_gateway, article, max_attempts, backoff, sleep)
        if not outcome.success:
            stats["failed"] += 1
            logger.error("Giving up on article %d after %d attempts: %s", article.id, outcome.attempts, outcome.error)
            _log_failure(session, article, outcome)
            continue

        stats["generated"] += 1
        # The gateway may have written through another session
        session.refresh(article)
        if auto_publish and publish_if_connected(session, publish_gateway, article):
            stats["published"] += 1


def run_generation_ahead(
    session: Session,
    generation_gateway: GenerationGateway,
    publish_gateway: PublishGateway,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
    max_attempts: int = GENERATION_MAX_ATTEMPTS,
    backoff: float = GENERATION_BACKOFF_SECONDS,
) -> dict[str, Any]:
    """Generate every article scheduled for tomorrow in auto-generate projects.

    ``now`` is server local time. A store error on one project is logged
    and the run continues with the next one.
    """
    stats = {"projects": 0, "processed": 0, "generated": 0, "published": 0, "failed": 0}

    projects = find_auto_generate_projects(session)
    if not projects:
        logger.info("No projects with auto-generation enabled")
        return {"success": True, "message": "No projects with auto-generation enabled", "stats": stats}

    window = tomorrow_window(now)
    logger.info("Generating articles scheduled between %s and %s (UTC)", window[0], window[1])

    for project in projects:
        stats["projects"] += 1
        try:
            _process_project(
                session, project, generation_gateway, publish_gateway, window, stats, sleep, max_attempts, backoff
            )
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Store error while processing project %d", project.id)

    logger.info(
        "Generation run done: %d generated, %d published, %d failed",
        stats["generated"],
        stats["published"],
        stats["failed"],
    )
    return {
        "success": True,
        "message": f"Processed {stats['processed']} articles, generated {stats['generated']}",
        "stats": stats,
    }
