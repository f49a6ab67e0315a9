"""WordPress REST API client.

Authenticates with HTTP Basic auth (username + application password) against
``{api_url}/wp-json/wp/v2``. Methods never raise for HTTP or network failures;
they return a ``WordPressResponse`` with ``success=False`` instead.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import requests

from config import HTTP_TIMEOUT
from db.models import CmsConnection

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 1000
MAX_EXCERPT_LENGTH = 5000
MAX_CONTENT_LENGTH = 1024 * 1024

_IMG_SRC_RE = re.compile(r'<img[^>]+src="([^">]+)"')
_ENTITY_RE = re.compile(r"&([a-z0-9]+|#[0-9]{1,6}|#x[0-9a-f]{1,6});", re.IGNORECASE)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_NON_ASCII_RE = re.compile(r"[^\x20-\x7E\n\r\t]")

# Entities decoded to plain ASCII. Markup-significant ones (&lt; &gt; &amp; &quot;)
# stay encoded so escaped code and attribute values survive.
_NAMED_ENTITIES = {
    "apos": "'",
    "nbsp": " ", "ndash": "-", "mdash": "-", "hellip": "...",
    "lsquo": "'", "rsquo": "'", "ldquo": '"', "rdquo": '"',
}
_TYPOGRAPHY = {
    "\u2018": "'", "\u2019": "'",
    "\u201c": '"', "\u201d": '"',
    "\u2013": "-", "\u2014": "-",
    "\u2026": "...",
}


@dataclass
class WordPressResponse:
    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None


@dataclass
class MediaUploadResult:
    success: bool
    media_id: int | None = None
    url: str | None = None
    error: str | None = None


@dataclass
class WordPressPost:
    title: str
    content: str
    excerpt: str = ""
    status: str = "draft"  # draft, publish, future
    extra: dict[str, Any] = field(default_factory=dict)  # slug, categories, tags...

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "status": self.status,
            **self.extra,
        }


def _decode_entity(match: re.Match) -> str:
    name = match.group(1)
    lowered = name.lower()
    if lowered in _NAMED_ENTITIES:
        return _NAMED_ENTITIES[lowered]
    if name.startswith("#"):
        try:
            code = int(name[2:], 16) if name[1] in "xX" else int(name[1:])
        except ValueError:
            return match.group(0)
        # Only the ASCII range is safe on utf8 (non-mb4) WordPress databases
        if 0 < code < 128 and chr(code) not in '<>&"':
            return chr(code)
    return match.group(0)


def sanitize_content(content: str, ascii_only: bool = True) -> str:
    """Clean post HTML so it survives any WordPress database charset."""
    sanitized = _ENTITY_RE.sub(_decode_entity, content)
    sanitized = sanitized.replace("\0", "")
    sanitized = _CONTROL_RE.sub("", sanitized)
    for char, replacement in _TYPOGRAPHY.items():
        sanitized = sanitized.replace(char, replacement)
    sanitized = _ZERO_WIDTH_RE.sub("", sanitized)
    if ascii_only:
        sanitized = _NON_ASCII_RE.sub("", sanitized)
    sanitized = re.sub(r"  +", " ", sanitized)

    if len(sanitized) > MAX_CONTENT_LENGTH:
        logger.warning("Content length (%d) exceeds safe limit, truncating", len(sanitized))
        sanitized = sanitized[:MAX_CONTENT_LENGTH]
    return sanitized


class WordPressClient:
    """Thin client over the WordPress REST API."""

    def __init__(
        self,
        api_url: str,
        username: str,
        application_password: str,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT,
        ascii_only: bool = True,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.ascii_only = ascii_only
        self._session = session or requests.Session()
        self._auth = (username, application_password)

    @classmethod
    def from_connection(cls, connection: CmsConnection, **kwargs: Any) -> "WordPressClient":
        """Build a client from a stored connection (username in api_key, app password in api_secret)."""
        return cls(
            api_url=connection.api_url or "",
            username=connection.api_key or "",
            application_password=connection.api_secret or "",
            **kwargs,
        )

    def _url(self, endpoint: str) -> str:
        return f"{self.api_url}/wp-json/wp/v2{endpoint}"

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> WordPressResponse:
        """Make an authenticated request and normalize the outcome."""
        try:
            resp = self._session.request(
                method,
                self._url(endpoint),
                auth=self._auth,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error("WordPress API request failed: %s", e)
            return WordPressResponse(success=False, error=str(e) or "Network request failed")

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error("WordPress API error %d on %s %s: %s", resp.status_code, method, endpoint, message)
            return WordPressResponse(
                success=False,
                data=data,
                error=message or f"HTTP {resp.status_code}: {resp.reason}",
                status_code=resp.status_code,
            )

        return WordPressResponse(success=True, data=data, status_code=resp.status_code)

    def test_connection(self) -> WordPressResponse:
        """Verify credentials by fetching the authenticated user."""
        logger.info("Testing WordPress connection to %s", self.api_url)
        result = self._request("GET", "/users/me")
        if not result.success:
            return result

        user = result.data if isinstance(result.data, dict) else {}
        logger.info("WordPress connection successful: %s", user.get("name"))
        return WordPressResponse(
            success=True,
            data={
                "siteUrl": self.api_url,
                "userName": user.get("name"),
                "userEmail": user.get("email"),
            },
            status_code=result.status_code,
        )

    def _prepare(self, payload: dict[str, Any]) -> dict[str, Any]:
        prepared = dict(payload)
        if prepared.get("content"):
            prepared["content"] = sanitize_content(prepared["content"], ascii_only=self.ascii_only)
        if "title" in prepared:
            prepared["title"] = (prepared["title"] or "")[:MAX_TITLE_LENGTH]
        if "excerpt" in prepared:
            prepared["excerpt"] = (prepared["excerpt"] or "")[:MAX_EXCERPT_LENGTH]
        return prepared

    def create_post(self, post: WordPressPost) -> WordPressResponse:
        logger.info("Creating WordPress post: %s", post.title)
        payload = self._prepare(post.to_payload())
        logger.debug("Content size: %d characters", len(payload.get("content", "")))
        result = self._request("POST", "/posts", json=payload)
        if result.success:
            logger.info("WordPress post created: %s", (result.data or {}).get("id"))
        return result

    def update_post(self, post_id: int, post: WordPressPost) -> WordPressResponse:
        logger.info("Updating WordPress post: %d", post_id)
        result = self._request("POST", f"/posts/{post_id}", json=self._prepare(post.to_payload()))
        if result.success:
            logger.info("WordPress post updated: %d", post_id)
        return result

    def delete_post(self, post_id: int) -> WordPressResponse:
        logger.info("Deleting WordPress post: %d", post_id)
        return self._request("DELETE", f"/posts/{post_id}")

    def get_categories(self) -> WordPressResponse:
        return self._request("GET", "/categories", params={"per_page": 100})

    def get_tags(self) -> WordPressResponse:
        return self._request("GET", "/tags", params={"per_page": 100})

    def upload_media(self, file: bytes, filename: str, mime_type: str) -> MediaUploadResult:
        """Upload raw bytes to the media library."""
        logger.info("Uploading media to WordPress: %s", filename)
        result = self._request(
            "POST",
            "/media",
            data=file,
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Content-Type": mime_type,
            },
        )
        if not result.success:
            return MediaUploadResult(success=False, error=result.error)

        data = result.data or {}
        return MediaUploadResult(success=True, media_id=data.get("id"), url=data.get("source_url"))

    def process_content_images(self, html_content: str) -> str:
        """Re-host external images in the WordPress media library.

        Every failure is absorbed: an image that cannot be downloaded or
        uploaded keeps its original URL.
        """
        sources = list(dict.fromkeys(_IMG_SRC_RE.findall(html_content)))
        if not sources:
            return html_content

        logger.info("Found %d images to process", len(sources))
        url_map: dict[str, str] = {}
        for original in sources:
            # Entities in the attribute (e.g. &amp;) must be decoded before fetching
            fetch_url = html.unescape(original)
            if fetch_url.startswith(self.api_url):
                continue
            try:
                resp = self._session.get(fetch_url, timeout=self.timeout)
                resp.raise_for_status()
            except requests.RequestException as e:
                logger.warning("Failed to download image %s: %s", fetch_url, e)
                continue

            content_type = resp.headers.get("content-type", "image/jpeg").split(";")[0]
            filename = fetch_url.rsplit("/", 1)[-1].split("?")[0] or "image.jpg"
            upload = self.upload_media(resp.content, filename, content_type)
            if upload.success and upload.url:
                url_map[original] = upload.url
                logger.info("Image uploaded: %s -> %s", fetch_url, upload.url)
            else:
                logger.warning("Image upload failed for %s: %s", fetch_url, upload.error)

        for original, new_url in url_map.items():
            html_content = html_content.replace(f'src="{original}"', f'src="{new_url}"')

        logger.info("Processed %d of %d images", len(url_map), len(sources))
        return html_content
