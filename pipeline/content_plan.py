"""Content-plan run: turn unused content ideas into articles on schedule.

A project is served when today is one of its preferred days, the clock is
within an hour of its publish time and its weekly quota is not yet met.
One article per project per run.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import DEFAULT_ARTICLES_PER_WEEK, DEFAULT_PUBLISH_TIME
from db.models import Article, ArticleSettings, ArticleStatus, ContentIdea, Project
from generation.work_items import resolve_work_item
from pipeline.auto_publish import publish_if_connected
from pipeline.gateways import GenerationGateway, PublishGateway
from pipeline.reconcile import mark_draft
from pipeline.scanner import find_auto_generate_projects, week_start

logger = logging.getLogger(__name__)


def _publish_hour(settings: ArticleSettings) -> int:
    return int((settings.publish_time or DEFAULT_PUBLISH_TIME).split(":")[0])


def is_due_today(settings: ArticleSettings, now: datetime) -> bool:
    """Preferred weekday (0 = Sunday) and within one hour of the publish hour."""
    today = (now.weekday() + 1) % 7
    if today not in (settings.preferred_days or []):
        return False
    return abs(now.hour - _publish_hour(settings)) <= 1


def articles_created_since(session: Session, project_id: int, since: datetime) -> int:
    return (
        session.query(func.count(Article.id))
        .filter(Article.project_id == project_id, Article.created_at >= since)
        .scalar()
    )


def _plan_project(
    session: Session,
    project: Project,
    generation_gateway: GenerationGateway,
    publish_gateway: PublishGateway,
    now: datetime,
) -> dict[str, Any] | None:
    settings = project.settings
    if not is_due_today(settings, now):
        return None

    quota = settings.articles_per_week or DEFAULT_ARTICLES_PER_WEEK
    if articles_created_since(session, project.id, week_start(now)) >= quota:
        logger.info("Project %d already met its weekly quota of %d", project.id, quota)
        return None

    item = resolve_work_item(session, project.id)
    if item is None:
        logger.info("Project %d has no unused content ideas", project.id)
        return None

    article = Article(
        project_id=project.id,
        title=item.keyword,
        keyword=item.keyword,
        content_type=item.content_type,
        difficulty=item.difficulty,
        status=ArticleStatus.GENERATING,
    )
    session.add(article)
    session.flush()
    if item.idea_id is not None:
        idea = session.get(ContentIdea, item.idea_id)
        if idea is not None and idea.article_id is None:
            idea.article_id = article.id
    session.commit()

    result = {
        "projectId": project.id,
        "projectName": project.name,
        "articleId": article.id,
        "keyword": item.keyword,
    }

    try:
        outcome = generation_gateway.generate(project.id, article.id, item.keyword, item.content_type)
        error = outcome.error
        success = outcome.success
    except Exception as e:
        logger.exception("Generation request failed for article %d", article.id)
        success, error = False, str(e)

    if not success:
        logger.error("Failed to generate article %d: %s", article.id, error)
        session.refresh(article)
        if article.status == ArticleStatus.GENERATING:
            mark_draft(session, article)
        return {**result, "status": "failed"}

    session.refresh(article)
    if settings.auto_publish:
        publish_if_connected(session, publish_gateway, article)
    return {**result, "status": "success"}


def run_content_plan(
    session: Session,
    generation_gateway: GenerationGateway,
    publish_gateway: PublishGateway,
    now: datetime | None = None,
) -> dict[str, Any]:
    """One content-plan pass over every auto-generate project.

    ``now`` is server local time. ``generated`` counts successful articles.
    """
    now = now or datetime.now()

    projects = find_auto_generate_projects(session)
    if not projects:
        logger.info("No projects with auto-generation enabled")
        return {
            "success": True,
            "message": "No projects with auto-generation enabled",
            "generated": 0,
            "results": [],
        }

    results = []
    for project in projects:
        try:
            result = _plan_project(session, project, generation_gateway, publish_gateway, now)
        except Exception:
            session.rollback()
            logger.exception("Planning failed for project %d", project.id)
            continue
        if result is not None:
            results.append(result)

    generated = sum(1 for r in results if r["status"] == "success")
    logger.info("Content-plan run done: %d of %d articles generated", generated, len(results))
    return {"success": True, "generated": generated, "results": results}
