"""Idempotent database migrations for seo-autopilot.

Older databases predate the publish metadata and the enrichment settings.
Each migration adds a nullable column only when it is missing, so the list
can run on every startup.
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS: list[tuple[str, str, str]] = [
    ("articles", "cms_post_id", "VARCHAR"),
    ("articles", "published_url", "VARCHAR"),
    ("articles", "published_at", "DATETIME"),
    ("articles", "meta_description", "VARCHAR"),
    ("article_settings", "include_images", "BOOLEAN"),
    ("article_settings", "include_videos", "BOOLEAN"),
    ("article_settings", "auto_internal_links", "BOOLEAN"),
    ("article_settings", "max_internal_links", "INTEGER"),
    ("article_settings", "quality_pass", "BOOLEAN"),
    ("cms_connections", "last_tested_at", "DATETIME"),
]


def _column_exists(engine: Engine, table: str, column: str) -> bool:
    """Check if a column exists in the given table."""
    columns = inspect(engine).get_columns(table)
    return column in {c["name"] for c in columns}


def run_migrations(engine: Engine) -> None:
    """Run all pending migrations idempotently."""
    with engine.connect() as conn:
        for table, column, col_type in MIGRATIONS:
            if not _column_exists(engine, table, column):
                logger.info("Adding column %s.%s (%s)", table, column, col_type)
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))
                conn.commit()
            else:
                logger.debug("Column %s.%s already exists, skipping", table, column)
