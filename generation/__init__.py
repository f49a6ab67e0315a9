from generation.generator import ArticleGenerator, GeneratedArticle, generate_for_article
from generation.llm import GenerationError, LLMClient
from generation.work_items import WorkItem, resolve_work_item

__all__ = [
    "ArticleGenerator",
    "GeneratedArticle",
    "generate_for_article",
    "GenerationError",
    "LLMClient",
    "WorkItem",
    "resolve_work_item",
]
