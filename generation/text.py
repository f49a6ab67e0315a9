"""Markdown clean-up helpers for generated articles."""

import re

_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*\n(.*)\n```\s*$", re.DOTALL | re.IGNORECASE)
_META_LINE_RE = re.compile(r"^\s*\**\s*meta\s+(title|description)\s*\**\s*:.*$", re.IGNORECASE | re.MULTILINE)
_LEADING_H1_RE = re.compile(r"^\s*#\s+[^\n]*\n")
_MARKDOWN_SYNTAX_RE = re.compile(r"[*_`>#\[\]]|\(https?://[^)]*\)")

META_DESCRIPTION_LENGTH = 160


def quality_pass(content: str) -> str:
    """Strip artefacts LLMs tend to add around the article body."""
    text = content.strip()
    m = _FENCE_RE.match(text)
    if m:
        text = m.group(1).strip()
    text = _META_LINE_RE.sub("", text)
    # The post title is sent separately, a leading H1 would duplicate it
    text = _LEADING_H1_RE.sub("", text, count=1)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return re.sub(r"-{2,}", "-", slug)


def meta_description(content: str, limit: int = META_DESCRIPTION_LENGTH) -> str:
    """First prose paragraph as plain text, cut on a word boundary."""
    for block in content.split("\n\n"):
        block = block.strip()
        if not block or block.startswith(("#", "!", "|", "-", "*", "```", "http")):
            continue
        plain = re.sub(r"\s+", " ", _MARKDOWN_SYNTAX_RE.sub("", block)).strip()
        if len(plain) <= limit:
            return plain
        cut = plain[: limit - 3].rsplit(" ", 1)[0]
        return cut.rstrip(",.;:") + "..."
    return ""
