from db.database import get_engine, get_session, init_db
from db.models import (
    Article,
    ArticleSettings,
    ArticleStatus,
    CmsConnection,
    ContentIdea,
    GenerationLog,
    Project,
)

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "Article",
    "ArticleSettings",
    "ArticleStatus",
    "CmsConnection",
    "ContentIdea",
    "GenerationLog",
    "Project",
]
