"""Selection of the keyword an article is generated for."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from db.models import ContentIdea


@dataclass(frozen=True)
class WorkItem:
    keyword: str
    content_type: str | None = None
    difficulty: str | None = None
    idea_id: int | None = None  # set when drawn from the content plan


def resolve_work_item(
    session: Session,
    project_id: int,
    keyword: str | None = None,
    content_type: str | None = None,
) -> WorkItem | None:
    """The explicit keyword when given, else the oldest unconsumed content idea.

    Returns None when there is nothing to generate.
    """
    if keyword and keyword.strip():
        return WorkItem(keyword=keyword.strip(), content_type=content_type)

    idea = (
        session.query(ContentIdea)
        .filter(ContentIdea.project_id == project_id, ContentIdea.article_id.is_(None))
        .order_by(ContentIdea.created_at.asc(), ContentIdea.id.asc())
        .first()
    )
    if idea is None:
        return None
    return WorkItem(
        keyword=idea.keyword,
        content_type=content_type or idea.content_type,
        difficulty=idea.difficulty,
        idea_id=idea.id,
    )
