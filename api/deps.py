"""FastAPI dependencies that hand provider clients to the routes.

Tests replace these through ``app.dependency_overrides``.
"""

from config import PIPELINE_DISPATCH
from generation.generator import ArticleGenerator
from pipeline.gateways import (
    GenerationGateway,
    HttpGenerationGateway,
    HttpPublishGateway,
    LocalGenerationGateway,
    LocalPublishGateway,
    PublishGateway,
)
from publishing.service import ClientFactory
from publishing.wordpress import WordPressClient


def get_publish_gateway() -> PublishGateway:
    if PIPELINE_DISPATCH == "local":
        return LocalPublishGateway()
    return HttpPublishGateway()


def get_generation_gateway() -> GenerationGateway:
    if PIPELINE_DISPATCH == "local":
        return LocalGenerationGateway()
    return HttpGenerationGateway()


def get_article_generator() -> ArticleGenerator:
    return ArticleGenerator.from_config()


def get_wordpress_client_factory() -> ClientFactory:
    return WordPressClient.from_connection
