"""SQLAlchemy models for seo-autopilot."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class ArticleStatus:
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    GENERATING = "generating"
    PUBLISHED = "published"


class Project(Base):
    """A customer site: owns articles, settings and CMS connections."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    website_url: Mapped[str | None] = mapped_column(String)
    competitors: Mapped[list[str] | None] = mapped_column(JSON)
    target_audiences: Mapped[list[str] | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    settings: Mapped["ArticleSettings | None"] = relationship(back_populates="project", uselist=False)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name!r})>"


class ArticleSettings(Base):
    """Per-project generation and automation settings (one row per project)."""

    __tablename__ = "article_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), unique=True, nullable=False)
    auto_generate: Mapped[bool] = mapped_column(Boolean, default=False)
    auto_publish: Mapped[bool] = mapped_column(Boolean, default=False)
    publish_time: Mapped[str] = mapped_column(String, default="09:00:00")  # HH:MM:SS server time
    preferred_days: Mapped[list[int] | None] = mapped_column(JSON)  # 0 = Sunday
    articles_per_week: Mapped[int] = mapped_column(Integer, default=3)
    tone: Mapped[str | None] = mapped_column(String)
    min_words: Mapped[int] = mapped_column(Integer, default=1500)
    max_words: Mapped[int] = mapped_column(Integer, default=2500)
    include_images: Mapped[bool] = mapped_column(Boolean, default=True)
    include_videos: Mapped[bool] = mapped_column(Boolean, default=True)
    auto_internal_links: Mapped[bool] = mapped_column(Boolean, default=True)
    max_internal_links: Mapped[int] = mapped_column(Integer, default=3)
    quality_pass: Mapped[bool] = mapped_column(Boolean, default=True)

    project: Mapped[Project] = relationship(back_populates="settings")


class CmsConnection(Base):
    """Publish target credentials for one platform of a project."""

    __tablename__ = "cms_connections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False)
    name: Mapped[str | None] = mapped_column(String)
    platform: Mapped[str] = mapped_column(String, default="wordpress")
    api_url: Mapped[str | None] = mapped_column(String)
    api_key: Mapped[str | None] = mapped_column(String)  # WordPress username
    api_secret: Mapped[str | None] = mapped_column(String)  # application password
    status: Mapped[str] = mapped_column(String, default="inactive")  # active, inactive
    last_tested_at: Mapped[datetime | None] = mapped_column(DateTime)

    __table_args__ = (Index("idx_connection_project_platform", "project_id", "platform"),)

    def __repr__(self) -> str:
        return f"<CmsConnection(id={self.id}, project_id={self.project_id}, platform={self.platform!r})>"


class Article(Base):
    """Generated article and its scheduling / publish state."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False)
    title: Mapped[str | None] = mapped_column(String)
    keyword: Mapped[str | None] = mapped_column(String)
    content_type: Mapped[str | None] = mapped_column(String)
    difficulty: Mapped[str | None] = mapped_column(String)
    status: Mapped[str] = mapped_column(String, default=ArticleStatus.DRAFT)
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime)  # naive UTC
    slug: Mapped[str | None] = mapped_column(String)
    content: Mapped[str | None] = mapped_column(Text)  # markdown
    meta_description: Mapped[str | None] = mapped_column(String)
    cms_post_id: Mapped[str | None] = mapped_column(String)
    published_url: Mapped[str | None] = mapped_column(String)
    published_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime)

    __table_args__ = (
        Index("idx_article_status_scheduled", "status", "scheduled_at"),
        Index("idx_article_project", "project_id"),
    )

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, status={self.status!r}, title={self.title!r})>"


class ContentIdea(Base):
    """Content-plan keyword waiting to be turned into an article."""

    __tablename__ = "content_ideas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False)
    keyword: Mapped[str] = mapped_column(String, nullable=False)
    content_type: Mapped[str | None] = mapped_column(String)
    difficulty: Mapped[str | None] = mapped_column(String)
    article_id: Mapped[int | None] = mapped_column(ForeignKey("articles.id"))  # set once when consumed
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class GenerationLog(Base):
    """Append-only record of articles that failed generation."""

    __tablename__ = "generation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(Integer, nullable=False)
    article_id: Mapped[int | None] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String, default="failed")
    error: Mapped[str | None] = mapped_column(Text)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

