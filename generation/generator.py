"""Article generation: prompt, LLM call, enrichment, persistence."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Article, ArticleSettings, ArticleStatus, ContentIdea, Project
from generation.links import add_internal_links, link_targets
from generation.llm import GenerationError, LLMClient
from generation.media import PixabayClient, YouTubeClient, embed_video, insert_image
from generation.prompts import DEFAULT_CONTENT_TYPE, build_article_prompt, build_title_prompt
from generation.text import meta_description, quality_pass, slugify
from generation.work_items import resolve_work_item

logger = logging.getLogger(__name__)

_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\((https?://[^)\s]+)\)")


@dataclass
class GeneratedArticle:
    title: str
    content: str
    slug: str
    meta_description: str


def _used_image_urls(session: Session, project_id: int) -> set[str]:
    rows = session.query(Article.content).filter(Article.project_id == project_id, Article.content.is_not(None))
    return {url for (content,) in rows for url in _MD_IMAGE_RE.findall(content)}


class ArticleGenerator:
    """Generates and saves one article. Media clients are optional."""

    def __init__(
        self,
        llm: LLMClient,
        pixabay: PixabayClient | None = None,
        youtube: YouTubeClient | None = None,
    ) -> None:
        self.llm = llm
        self.pixabay = pixabay
        self.youtube = youtube

    @classmethod
    def from_config(cls) -> "ArticleGenerator":
        """Generator wired to the configured providers."""
        return cls(LLMClient(), PixabayClient(), YouTubeClient())

    def _title(self, keyword: str, content_type: str) -> str:
        try:
            title = self.llm.complete(build_title_prompt(keyword, content_type), max_tokens=100)
        except GenerationError:
            logger.warning("Title generation failed for %r, using fallback", keyword)
            title = ""
        return title.strip().strip('"').strip() or f"{content_type}: {keyword}"

    def _enrich(
        self,
        session: Session,
        project: Project,
        article: Article,
        content: str,
        keyword: str,
        settings: ArticleSettings | None,
    ) -> str:
        """Optional post-processing. A failing step is logged and skipped."""
        if settings is None or settings.quality_pass:
            try:
                content = quality_pass(content)
            except Exception:
                logger.warning("Quality pass failed for article %d", article.id, exc_info=True)

        if settings is None or settings.auto_internal_links:
            try:
                targets = link_targets(session, project.id, exclude_article_id=article.id)
                max_links = settings.max_internal_links if settings else 3
                content = add_internal_links(content, targets, max_links=max_links)
            except Exception:
                logger.warning("Internal linking failed for article %d", article.id, exc_info=True)

        if self.pixabay is not None and (settings is None or settings.include_images):
            try:
                image = self.pixabay.find_image(keyword, _used_image_urls(session, project.id))
                if image is not None:
                    content = insert_image(content, image)
            except Exception:
                logger.warning("Image enrichment failed for article %d", article.id, exc_info=True)

        if self.youtube is not None and (settings is None or settings.include_videos):
            try:
                video = self.youtube.find_video(keyword)
                if video is not None:
                    content = embed_video(content, video)
            except Exception:
                logger.warning("Video enrichment failed for article %d", article.id, exc_info=True)

        return content

    def generate(
        self,
        session: Session,
        project: Project,
        article: Article,
        keyword: str,
        content_type: str | None = None,
    ) -> GeneratedArticle:
        """Generate content for ``article`` and save it.

        A ``scheduled`` article keeps that status so the publish scan still
        picks it up, a ``published`` one keeps its publish fields; anything
        else is saved as a draft.
        """
        content_type = content_type or article.content_type or DEFAULT_CONTENT_TYPE
        settings = project.settings
        logger.info("Generating article %d for keyword %r", article.id, keyword)

        body = self.llm.complete(build_article_prompt(project, keyword, content_type, settings))
        if not body:
            raise GenerationError("Failed to generate article content")

        title = self._title(keyword, content_type)
        content = self._enrich(session, project, article, body, keyword, settings)

        generated = GeneratedArticle(
            title=title,
            content=content,
            slug=article.slug or slugify(title),
            meta_description=article.meta_description or meta_description(content),
        )

        article.title = generated.title
        article.content = generated.content
        article.slug = generated.slug
        article.meta_description = generated.meta_description
        article.keyword = article.keyword or keyword
        article.content_type = article.content_type or content_type
        if article.status not in (ArticleStatus.SCHEDULED, ArticleStatus.PUBLISHED):
            article.status = ArticleStatus.DRAFT
        article.updated_at = datetime.utcnow()
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Error saving article %d: %s", article.id, e)
            raise GenerationError("Failed to save article") from e

        logger.info("Article %d generated: %s", article.id, title)
        return generated


def generate_for_article(
    session: Session,
    generator: ArticleGenerator,
    project_id: int,
    article_id: int,
    keyword: str | None = None,
    content_type: str | None = None,
) -> GeneratedArticle:
    """Resolve project, article and keyword, then generate.

    Raises LookupError for an unknown project or article and GenerationError
    when there is no keyword to write about or generation fails.
    """
    project = session.get(Project, project_id)
    if project is None:
        raise LookupError("Project not found")
    article = session.get(Article, article_id)
    if article is None or article.project_id != project.id:
        raise LookupError("Article not found")

    item = resolve_work_item(
        session,
        project.id,
        keyword=keyword or article.keyword,
        content_type=content_type or article.content_type,
    )
    if item is None:
        raise GenerationError("No keyword available for article")

    generated = generator.generate(session, project, article, item.keyword, item.content_type)

    if item.idea_id is not None:
        idea = session.get(ContentIdea, item.idea_id)
        if idea is not None and idea.article_id is None:
            idea.article_id = article.id
            session.commit()
    return generated
