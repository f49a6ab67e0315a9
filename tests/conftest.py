"""Shared fixtures: a temporary database per test and fake pipeline gateways."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from db.database import get_session, init_db
from db.models import Article, ArticleSettings, ArticleStatus, CmsConnection, Project
from pipeline.gateways import GenerationOutcome, PublishOutcome

CRON_SECRET = "test-secret"
AUTH = {"Authorization": f"Bearer {CRON_SECRET}"}


@pytest.fixture(autouse=True)
def setup_db(tmp_path, monkeypatch):
    """Use a temporary database for each test."""
    db_path = tmp_path / "test.db"
    # Patch in both config and db.database (which imports by value)
    monkeypatch.setattr("config.DB_PATH", db_path)
    monkeypatch.setattr("config.DATA_DIR", tmp_path)
    monkeypatch.setattr("db.database.DB_PATH", db_path)
    monkeypatch.setattr("db.database.DATA_DIR", tmp_path)
    monkeypatch.setattr("db.database.DATABASE_URL", "")

    # Reset engine/session so they use the new path
    import db.database as db_mod
    db_mod._engine = None
    db_mod._SessionFactory = None

    init_db()
    yield
    if db_mod._engine is not None:
        db_mod._engine.dispose()
    db_mod._engine = None
    db_mod._SessionFactory = None


@pytest.fixture
def session():
    s = get_session()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr("api.auth.CRON_SECRET", CRON_SECRET)
    from main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


def make_project(session, name="Acme", auto_generate=False, auto_publish=False, **settings):
    project = Project(
        name=name,
        description="Garden tools for small spaces",
        website_url="https://acme.example",
        competitors=["rival.example"],
        target_audiences=["urban gardeners"],
    )
    session.add(project)
    session.flush()
    session.add(
        ArticleSettings(
            project_id=project.id,
            auto_generate=auto_generate,
            auto_publish=auto_publish,
            **settings,
        )
    )
    session.commit()
    return project


def make_connection(session, project, status="active", **fields):
    values = {
        "name": "Blog",
        "platform": "wordpress",
        "api_url": "https://blog.example",
        "api_key": "editor",
        "api_secret": "app-pass",
    }
    values.update(fields)
    connection = CmsConnection(project_id=project.id, status=status, **values)
    session.add(connection)
    session.commit()
    return connection


def make_article(session, project, status=ArticleStatus.SCHEDULED, scheduled_at=None, **fields):
    values = {
        "title": "How to grow tomatoes on a balcony",
        "keyword": "balcony tomatoes",
        "content": "Tomatoes love sun.\n\n## Pots\n\nUse big pots.",
        "slug": "balcony-tomatoes",
        "meta_description": "Grow tomatoes on a balcony.",
    }
    values.update(fields)
    article = Article(project_id=project.id, status=status, scheduled_at=scheduled_at, **values)
    session.add(article)
    session.commit()
    return article


def assert_publish_fields_consistent(article):
    """Publish metadata is set exactly when the article is published."""
    fields = (article.cms_post_id, article.published_url, article.published_at)
    if article.status == ArticleStatus.PUBLISHED:
        assert all(f is not None for f in fields)
    else:
        assert all(f is None for f in fields)


class FakePublishGateway:
    """Returns queued outcomes (or raises queued exceptions) and records calls."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def publish(self, article_id, connection_id, status="publish"):
        self.calls.append((article_id, connection_id, status))
        outcome = self.outcomes.pop(0) if self.outcomes else PublishOutcome(success=False, error="no outcome queued")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeGenerationGateway:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate(self, project_id, article_id, keyword=None, content_type=None):
        self.calls.append((project_id, article_id, keyword, content_type))
        outcome = self.outcomes.pop(0) if self.outcomes else GenerationOutcome(success=True)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def utcnow():
    return datetime.utcnow().replace(microsecond=0)
