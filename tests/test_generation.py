"""Tests for article generation (fake LLM, mocked media APIs)."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests
from openai import OpenAIError

from api.deps import get_article_generator
from conftest import AUTH, make_article, make_project
from db.database import get_session
from db.models import Article, ArticleStatus, ContentIdea
from generation.generator import ArticleGenerator, generate_for_article
from generation.links import LinkTarget, add_internal_links, link_targets
from generation.llm import GenerationError, LLMClient
from generation.media import PixabayClient, StockImage, Video, YouTubeClient, embed_video, insert_image
from generation.text import meta_description, quality_pass, slugify
from generation.work_items import resolve_work_item
from pipeline.gateways import LocalGenerationGateway

BODY = """```markdown
# Balcony Tomatoes: The Complete Guide

Meta description: grow tomatoes anywhere

Growing balcony tomatoes is easier than it looks if you pick the right pot.



## Choosing pots

Pick deep pots for balcony tomatoes.

## Watering

Water every morning.
```"""


class FakeLLM:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def complete(self, prompt, temperature=0.7, max_tokens=4000):
        self.prompts.append((prompt, max_tokens))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


# --- text helpers ---


def test_quality_pass_strips_llm_artefacts():
    cleaned = quality_pass(BODY)
    assert cleaned.startswith("Growing balcony tomatoes")
    assert "Meta description" not in cleaned
    assert "```" not in cleaned
    assert "\n\n\n" not in cleaned


def test_slugify():
    assert slugify("10 Tips: Grow Tomatoes -- Fast!") == "10-tips-grow-tomatoes-fast"


def test_meta_description_first_paragraph():
    content = "## Intro\n\nGrowing **tomatoes** on a [balcony](https://x.example) is fun.\n\nMore."
    assert meta_description(content) == "Growing tomatoes on a balcony is fun."


def test_meta_description_truncates_on_word_boundary():
    desc = meta_description("word " * 100)
    assert len(desc) <= 160
    assert desc.endswith("...")
    assert "wor..." not in desc


# --- internal links ---


def test_add_internal_links_first_plain_mention_only():
    content = "# Compost basics\n\nCompost helps. More compost.\n\n```\ncompost\n```\n\nSee [compost](https://a)."
    linked = add_internal_links(content, [LinkTarget("compost", "https://blog.example/compost")])

    assert linked.count("https://blog.example/compost") == 1
    assert "[Compost](https://blog.example/compost) helps." in linked
    assert linked.startswith("# Compost basics")


def test_add_internal_links_respects_max_links():
    content = "Soil and mulch and compost."
    targets = [LinkTarget("soil", "https://s"), LinkTarget("mulch", "https://m"), LinkTarget("compost", "https://c")]
    linked = add_internal_links(content, targets, max_links=2)
    assert linked == "[Soil](https://s) and [mulch](https://m) and compost."


def test_link_targets_only_published_articles(session):
    project = make_project(session)
    make_article(
        session,
        project,
        status=ArticleStatus.PUBLISHED,
        keyword="compost",
        cms_post_id="1",
        published_url="https://blog.example/compost",
        published_at=datetime(2026, 1, 1),
    )
    make_article(session, project, status=ArticleStatus.DRAFT, keyword="mulch")

    targets = link_targets(session, project.id)

    assert targets == [LinkTarget("compost", "https://blog.example/compost")]


# --- media ---


def test_insert_image_after_first_paragraph():
    content = "Intro.\n\n## Next\n\nText."
    out = insert_image(content, StockImage(url="https://img/x.jpg", alt_text="tomato, plant", tags=""))
    assert out == "Intro.\n\n![tomato, plant](https://img/x.jpg)\n\n## Next\n\nText."


def test_embed_video_before_second_section():
    content = "Intro.\n\n## One\n\nA.\n\n## Two\n\nB."
    out = embed_video(content, Video(video_id="abc", title='Grow "big" tomatoes', channel="G"))
    assert "## One\n\nA.\n\n\n## Watch: Grow big tomatoes\n\nhttps://www.youtube.com/watch?v=abc\n\n\n## Two" in out


def test_pixabay_prefers_relevant_unused_image():
    http = MagicMock()
    http.get.return_value.json.return_value = {
        "hits": [
            {"largeImageURL": "https://img/car.jpg", "tags": "car, road"},
            {"largeImageURL": "https://img/used.jpg", "tags": "tomato, garden"},
            {"largeImageURL": "https://img/new.jpg", "tags": "tomato, balcony, plant, pot"},
        ]
    }
    client = PixabayClient(api_key="k", session=http)

    image = client.find_image("Balcony tomato!", used_urls={"https://img/used.jpg"})

    assert image.url == "https://img/new.jpg"
    assert image.alt_text == "tomato, balcony, plant"
    assert http.get.call_args.kwargs["params"]["q"] == "balcony tomato"


def test_media_clients_without_key_or_on_error():
    http = MagicMock()
    assert PixabayClient(api_key="", session=http).find_image("tomato") is None
    assert YouTubeClient(api_key="", session=http).find_video("tomato") is None
    http.get.assert_not_called()

    http.get.side_effect = requests.ConnectionError("offline")
    assert YouTubeClient(api_key="k", session=http).find_video("tomato") is None


def test_youtube_returns_first_video():
    http = MagicMock()
    http.get.return_value.json.return_value = {
        "items": [{"id": {"videoId": "v1"}, "snippet": {"title": "Tomatoes", "channelTitle": "Garden TV"}}]
    }
    video = YouTubeClient(api_key="k", session=http).find_video("tomatoes")
    assert video == Video(video_id="v1", title="Tomatoes", channel="Garden TV")


# --- LLM client ---


def test_llm_client_returns_stripped_text():
    sdk = MagicMock()
    sdk.chat.completions.create.return_value.choices = [MagicMock(message=MagicMock(content="  Hello  "))]
    llm = LLMClient(client=sdk, model="test-model")

    assert llm.complete("hi", max_tokens=10) == "Hello"
    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 10
    assert kwargs["temperature"] == 0.7
    assert llm.calls == 1


def test_llm_client_wraps_sdk_errors():
    sdk = MagicMock()
    sdk.chat.completions.create.side_effect = OpenAIError("rate limited")
    with pytest.raises(GenerationError):
        LLMClient(client=sdk).complete("hi")


# --- work items ---


def test_resolve_work_item_prefers_explicit_keyword(session):
    project = make_project(session)
    session.add(ContentIdea(project_id=project.id, keyword="idea"))
    session.commit()

    item = resolve_work_item(session, project.id, keyword="  explicit  ", content_type="Guide")

    assert item.keyword == "explicit"
    assert item.idea_id is None


def test_resolve_work_item_falls_back_to_oldest_unused_idea(session):
    project = make_project(session)
    session.add_all(
        [
            ContentIdea(project_id=project.id, keyword="used", article_id=None, created_at=datetime(2026, 1, 1)),
            ContentIdea(project_id=project.id, keyword="oldest", created_at=datetime(2026, 1, 2), difficulty="hard"),
            ContentIdea(project_id=project.id, keyword="newer", created_at=datetime(2026, 1, 3)),
        ]
    )
    session.commit()
    article = make_article(session, project)
    used = session.query(ContentIdea).filter_by(keyword="used").one()
    used.article_id = article.id
    session.commit()

    item = resolve_work_item(session, project.id)

    assert item.keyword == "oldest"
    assert item.difficulty == "hard"


def test_resolve_work_item_none_when_nothing_left(session):
    project = make_project(session)
    assert resolve_work_item(session, project.id) is None


# --- generator ---


def test_generate_saves_article_and_keeps_scheduled(session):
    project = make_project(session, include_images=False, include_videos=False)
    article = make_article(session, project, status=ArticleStatus.SCHEDULED, slug=None, meta_description=None)
    llm = FakeLLM(BODY, '"Balcony Tomatoes Made Easy"')

    generated = generate_for_article(session, ArticleGenerator(llm), project.id, article.id)

    assert generated.title == "Balcony Tomatoes Made Easy"
    assert generated.slug == "balcony-tomatoes-made-easy"
    assert generated.meta_description.startswith("Growing balcony tomatoes")
    assert "balcony tomatoes" in llm.prompts[0][0]
    assert llm.prompts[1][1] == 100
    session.expire_all()
    stored = session.get(Article, article.id)
    assert stored.status == ArticleStatus.SCHEDULED
    assert stored.content.startswith("Growing balcony tomatoes")


def test_generate_title_fallback_and_draft_status(session):
    project = make_project(session, include_images=False, include_videos=False)
    article = make_article(session, project, status=ArticleStatus.GENERATING, content_type="Guide")
    llm = FakeLLM("Some body text.", GenerationError("title failed"))

    generated = generate_for_article(session, ArticleGenerator(llm), project.id, article.id)

    assert generated.title == "Guide: balcony tomatoes"
    assert session.get(Article, article.id).status == ArticleStatus.DRAFT


def test_generate_empty_body_raises(session):
    project = make_project(session)
    article = make_article(session, project)
    with pytest.raises(GenerationError, match="Failed to generate article content"):
        generate_for_article(session, ArticleGenerator(FakeLLM("")), project.id, article.id)


def test_generate_links_consumed_idea(session):
    project = make_project(session, include_images=False, include_videos=False)
    article = make_article(session, project, keyword=None)
    session.add(ContentIdea(project_id=project.id, keyword="raised beds", content_type="Guide"))
    session.commit()

    generate_for_article(session, ArticleGenerator(FakeLLM("Body.", "Raised Beds")), project.id, article.id)

    idea = session.query(ContentIdea).one()
    assert idea.article_id == article.id
    assert session.get(Article, article.id).keyword == "raised beds"


def test_generate_unknown_records(session):
    project = make_project(session)
    with pytest.raises(LookupError, match="Project not found"):
        generate_for_article(session, ArticleGenerator(FakeLLM()), 999, 1)
    with pytest.raises(LookupError, match="Article not found"):
        generate_for_article(session, ArticleGenerator(FakeLLM()), project.id, 999)


def test_enrichment_failure_is_skipped(session):
    project = make_project(session)
    article = make_article(session, project)
    pixabay = MagicMock()
    pixabay.find_image.side_effect = RuntimeError("boom")
    youtube = MagicMock()
    youtube.find_video.return_value = Video(video_id="v1", title="Tomatoes", channel="G")

    generated = generate_for_article(
        session, ArticleGenerator(FakeLLM("Intro.\n\n## A\n\nx", "T"), pixabay=pixabay, youtube=youtube), project.id, article.id
    )

    assert "https://www.youtube.com/watch?v=v1" in generated.content


# --- endpoint and local gateway ---


def _seed():
    session = get_session()
    project = make_project(session, include_images=False, include_videos=False)
    article = make_article(session, project)
    ids = project.id, article.id
    session.close()
    return ids


def test_generate_article_endpoint(client):
    client.app.dependency_overrides[get_article_generator] = lambda: ArticleGenerator(FakeLLM("Body text.", "A Title"))
    project_id, article_id = _seed()

    resp = client.post(
        "/api/generate-article",
        json={"projectId": project_id, "articleId": article_id, "keyword": "tomatoes"},
        headers=AUTH,
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "title": "A Title", "content": "Body text."}


def test_generate_article_endpoint_errors(client):
    client.app.dependency_overrides[get_article_generator] = lambda: ArticleGenerator(FakeLLM(""))
    project_id, article_id = _seed()

    assert client.post("/api/generate-article", json={"projectId": project_id}, headers=AUTH).status_code == 400
    assert client.post("/api/generate-article", json={"projectId": 999, "articleId": 1}, headers=AUTH).status_code == 404
    resp = client.post("/api/generate-article", json={"projectId": project_id, "articleId": article_id}, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to generate article content"
    assert client.post("/api/generate-article", json={}).status_code == 401


def test_local_generation_gateway():
    project_id, article_id = _seed()
    ok = LocalGenerationGateway(generator_factory=lambda: ArticleGenerator(FakeLLM("Body.", "Title")))
    failing = LocalGenerationGateway(generator_factory=lambda: ArticleGenerator(FakeLLM("")))

    assert ok.generate(project_id, article_id).success
    outcome = failing.generate(project_id, article_id)
    assert not outcome.success
    assert outcome.error == "Failed to generate article content"
