"""Queries that pick the articles a pipeline run works on."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session, load_only

from db.models import Article, ArticleSettings, ArticleStatus, Project

_DUE_COLUMNS = (
    Article.id,
    Article.title,
    Article.project_id,
    Article.scheduled_at,
    Article.slug,
    Article.content,
    Article.meta_description,
    Article.status,
)


def find_due_articles(session: Session, now: datetime | None = None) -> list[Article]:
    """Scheduled articles whose time has come, earliest first.

    Store errors propagate: a failed scan aborts the whole run.
    """
    now = now or datetime.utcnow()
    return (
        session.query(Article)
        .options(load_only(*_DUE_COLUMNS))
        .filter(Article.status == ArticleStatus.SCHEDULED, Article.scheduled_at <= now)
        .order_by(Article.scheduled_at.asc())
        .all()
    )


def _local_to_utc(dt: datetime) -> datetime:
    # Naive datetimes are interpreted as server local time
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def tomorrow_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """[tomorrow 00:00:00.000, tomorrow 23:59:59.999] in server local time, as naive UTC."""
    local_now = now or datetime.now()
    start = (local_now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    end = start.replace(hour=23, minute=59, second=59, microsecond=999000)
    return _local_to_utc(start), _local_to_utc(end)


def week_start(now: datetime | None = None) -> datetime:
    """Start of the current week (Sunday 00:00 local), as naive UTC."""
    local_now = now or datetime.now()
    days_since_sunday = (local_now.weekday() + 1) % 7
    start = (local_now - timedelta(days=days_since_sunday)).replace(hour=0, minute=0, second=0, microsecond=0)
    return _local_to_utc(start)


def find_auto_generate_projects(session: Session) -> list[Project]:
    return (
        session.query(Project)
        .join(ArticleSettings, ArticleSettings.project_id == Project.id)
        .filter(ArticleSettings.auto_generate.is_(True))
        .order_by(Project.id)
        .all()
    )


def find_scheduled_between(session: Session, project_id: int, start: datetime, end: datetime) -> list[Article]:
    return (
        session.query(Article)
        .filter(
            Article.project_id == project_id,
            Article.status == ArticleStatus.SCHEDULED,
            Article.scheduled_at >= start,
            Article.scheduled_at <= end,
        )
        .order_by(Article.scheduled_at.asc())
        .all()
    )
