"""Markdown to WordPress-ready HTML."""

import re

import markdown
from bs4 import BeautifulSoup, Tag

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)

# GFM-style tables and fences, single newlines become <br />
_MD_EXTENSIONS = ["tables", "fenced_code", "nl2br", "sane_lists"]

TABLE_STYLE = "width:100%;border-collapse:collapse;margin:1.5em 0;"
TH_STYLE = (
    "border:1px solid #ddd;padding:8px 12px;background-color:#f5f5f5;"
    "text-align:left;font-weight:600;"
)
TD_STYLE = "border:1px solid #ddd;padding:8px 12px;"


def markdown_to_html(text: str | None) -> str:
    """Convert article markdown to HTML."""
    return markdown.markdown(text or "", extensions=_MD_EXTENSIONS)


def strip_html_comments(html: str) -> str:
    return _COMMENT_RE.sub("", html)


def _style_cells(row: Tag) -> None:
    for cell in row.find_all("th"):
        cell["style"] = TH_STYLE
    for cell in row.find_all("td"):
        cell["style"] = TD_STYLE


def _restructure_table(soup: BeautifulSoup, table: Tag) -> None:
    """Split bare rows into thead/tbody, style them and wrap the table in a figure."""
    rows = table.find_all("tr", recursive=False)
    header_rows = [row for row in rows if row.find("th") is not None]
    body_rows = [row for row in rows if row.find("th") is None]
    for row in rows:
        row.extract()

    table["style"] = TABLE_STYLE
    if header_rows:
        thead = soup.new_tag("thead")
        for row in header_rows:
            _style_cells(row)
            thead.append(row)
        table.append(thead)

    # tbody is always emitted so the table reads as normalized on the next pass
    tbody = soup.new_tag("tbody")
    for row in body_rows:
        _style_cells(row)
        tbody.append(row)
    table.append(tbody)

    parent = table.parent
    if parent is None or parent.name != "figure":
        table.wrap(soup.new_tag("figure", attrs={"class": "wp-block-table"}))


def normalize_tables(html: str) -> str:
    """Give bare tables a thead/tbody structure and inline styling.

    Tables that already carry a <thead> or <tbody> are left alone, and when no
    table needs work the input string is returned unchanged, so applying this
    to its own output is a no-op.
    """
    if "<table" not in html.lower():
        return html

    soup = BeautifulSoup(html, "html.parser")
    changed = False
    for table in soup.find_all("table"):
        if table.find(["thead", "tbody"]) is not None:
            continue
        _restructure_table(soup, table)
        changed = True
    return str(soup) if changed else html


def render_article_html(text: str | None) -> str:
    """Full markdown -> publishable HTML pipeline."""
    html = markdown_to_html(text)
    html = strip_html_comments(html)
    return normalize_tables(html)
