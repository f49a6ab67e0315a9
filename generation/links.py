"""Internal linking between articles of the same project."""

import logging
import re
from dataclasses import dataclass

from sqlalchemy.orm import Session

from db.models import Article, ArticleStatus

logger = logging.getLogger(__name__)

_EXISTING_LINK_RE = re.compile(r"\[[^\]]*\]\([^)]*\)|https?://\S+")


@dataclass
class LinkTarget:
    anchor: str
    url: str


def link_targets(session: Session, project_id: int, exclude_article_id: int | None = None, limit: int = 50) -> list[LinkTarget]:
    """Published articles of the project that can be linked to, by keyword."""
    query = session.query(Article).filter(
        Article.project_id == project_id,
        Article.status == ArticleStatus.PUBLISHED,
        Article.published_url.is_not(None),
        Article.keyword.is_not(None),
    )
    if exclude_article_id is not None:
        query = query.filter(Article.id != exclude_article_id)
    articles = query.order_by(Article.published_at.desc()).limit(limit).all()
    return [LinkTarget(anchor=a.keyword, url=a.published_url) for a in articles if a.keyword.strip()]


def _link_in_line(line: str, target: LinkTarget) -> str | None:
    pattern = re.compile(rf"\b{re.escape(target.anchor.strip())}\b", re.IGNORECASE)
    protected = [m.span() for m in _EXISTING_LINK_RE.finditer(line)]
    for m in pattern.finditer(line):
        start, end = m.span()
        if any(s <= start < e or s < end <= e for s, e in protected):
            continue
        return f"{line[:start]}[{m.group(0)}]({target.url}){line[end:]}"
    return None


def add_internal_links(content: str, targets: list[LinkTarget], max_links: int = 3) -> str:
    """Link the first plain-text mention of each target keyword.

    Headings, fenced code and existing links are never touched; each target is
    linked at most once and at most ``max_links`` links are added overall.
    """
    if not targets or max_links <= 0:
        return content

    lines = content.split("\n")
    added = 0
    for target in targets:
        if added >= max_links:
            break
        in_fence = False
        for i, line in enumerate(lines):
            if line.lstrip().startswith("```"):
                in_fence = not in_fence
                continue
            if in_fence or line.lstrip().startswith("#"):
                continue
            linked = _link_in_line(line, target)
            if linked is not None:
                lines[i] = linked
                added += 1
                break

    if added:
        logger.info("Added %d internal links", added)
    return "\n".join(lines)
