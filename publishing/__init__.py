from publishing.html import normalize_tables, render_article_html
from publishing.service import PublishResult, build_post_payload, publish_article
from publishing.wordpress import WordPressClient, WordPressPost, WordPressResponse

__all__ = [
    "normalize_tables",
    "render_article_html",
    "PublishResult",
    "build_post_payload",
    "publish_article",
    "WordPressClient",
    "WordPressPost",
    "WordPressResponse",
]
