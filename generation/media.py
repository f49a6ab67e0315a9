"""Stock image (Pixabay) and video (YouTube) enrichment.

Both searches are best-effort: a missing API key, an HTTP error or an empty
result all come back as ``None`` and the article is saved without the media.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

import requests

from config import HTTP_TIMEOUT, PIXABAY_API_KEY, PIXABAY_API_URL, YOUTUBE_API_KEY, YOUTUBE_SEARCH_URL

logger = logging.getLogger(__name__)


@dataclass
class StockImage:
    url: str
    alt_text: str
    tags: str


@dataclass
class Video:
    video_id: str
    title: str
    channel: str

    @property
    def watch_url(self) -> str:
        # WordPress turns a bare YouTube URL on its own line into an oEmbed
        return f"https://www.youtube.com/watch?v={self.video_id}"


def _clean_query(query: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"[^\w\s]", " ", query.lower())).strip()


def _is_relevant(hit: dict[str, Any], query: str) -> bool:
    """At least one meaningful query word must appear in the image tags."""
    words = [w for w in query.split() if len(w) > 2]
    tags = (hit.get("tags") or "").lower()
    return any(w in tags for w in words)


class PixabayClient:
    """Search landscape photos on Pixabay."""

    def __init__(self, api_key: str = PIXABAY_API_KEY, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self._session = session or requests.Session()

    def search(self, query: str, per_page: int = 20) -> list[dict[str, Any]]:
        if not self.api_key:
            logger.info("Pixabay API key not configured, skipping image search")
            return []
        params = {
            "key": self.api_key,
            "q": query,
            "image_type": "photo",
            "orientation": "horizontal",
            "per_page": per_page,
            "min_width": 1200,
            "safesearch": "true",
        }
        try:
            resp = self._session.get(PIXABAY_API_URL, params=params, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            return resp.json().get("hits", [])
        except (requests.RequestException, ValueError) as e:
            logger.warning("Pixabay search failed: %s", e)
            return []

    def find_image(self, query: str, used_urls: set[str] | None = None) -> StockImage | None:
        """Most relevant image not yet used by the project (a used one if nothing else fits)."""
        used_urls = used_urls or set()
        cleaned = _clean_query(query)
        hits = [h for h in self.search(cleaned) if h.get("largeImageURL") and _is_relevant(h, cleaned)]
        if not hits:
            logger.info("No relevant images found for %r", cleaned)
            return None

        fresh = [h for h in hits if h["largeImageURL"] not in used_urls]
        chosen = (fresh or hits)[0]
        tags = chosen.get("tags", "")
        alt_text = ", ".join(t.strip() for t in tags.split(",")[:3] if t.strip()) or cleaned
        return StockImage(url=chosen["largeImageURL"], alt_text=alt_text, tags=tags)


class YouTubeClient:
    """Search embeddable videos through the YouTube Data API."""

    def __init__(self, api_key: str = YOUTUBE_API_KEY, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self._session = session or requests.Session()

    def find_video(self, keyword: str) -> Video | None:
        if not self.api_key:
            logger.info("YouTube API key not configured, skipping video search")
            return None
        params = {
            "part": "snippet",
            "q": keyword,
            "type": "video",
            "videoDuration": "medium",
            "videoEmbeddable": "true",
            "maxResults": 5,
            "order": "relevance",
            "key": self.api_key,
        }
        try:
            resp = self._session.get(YOUTUBE_SEARCH_URL, params=params, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            items = resp.json().get("items", [])
        except (requests.RequestException, ValueError) as e:
            logger.warning("YouTube search failed: %s", e)
            return None

        for item in items:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                snippet = item.get("snippet") or {}
                return Video(
                    video_id=video_id,
                    title=snippet.get("title", ""),
                    channel=snippet.get("channelTitle", ""),
                )
        logger.info("No YouTube videos found for %r", keyword)
        return None


def insert_image(content: str, image: StockImage) -> str:
    """Place the image after the first paragraph."""
    block = f"![{image.alt_text}]({image.url})"
    idx = content.find("\n\n")
    if idx == -1:
        return f"{content}\n\n{block}\n"
    return f"{content[:idx]}\n\n{block}{content[idx:]}"


def video_insertion_point(content: str) -> int:
    """Offset just before the second H2, else after the first paragraph."""
    first_h2 = content.find("\n## ")
    if first_h2 != -1:
        second_h2 = content.find("\n## ", first_h2 + 1)
        if second_h2 != -1:
            return second_h2
    first_para = content.find("\n\n")
    return first_para + 2 if first_para != -1 else 0


def embed_video(content: str, video: Video) -> str:
    safe_title = re.sub(r'[<>"]', "", video.title.replace("&quot;", "").replace("&#39;", "")).strip()
    section = f"\n\n## Watch: {safe_title}\n\n{video.watch_url}\n\n"
    pos = video_insertion_point(content)
    return content[:pos] + section + content[pos:]
