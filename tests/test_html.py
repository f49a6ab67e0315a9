"""Tests for markdown rendering and table normalization."""

from bs4 import BeautifulSoup

from publishing.html import (
    TD_STYLE,
    TH_STYLE,
    normalize_tables,
    render_article_html,
    strip_html_comments,
)

BARE_TABLE = (
    "<p>Compare:</p>"
    "<table>"
    "<tr><th>Tool</th><th>Price</th></tr>"
    "<tr><td>Trowel</td><td>$9</td></tr>"
    "<tr><td>Hoe</td><td>$15</td></tr>"
    "</table>"
)


def test_bare_table_split_into_head_and_body():
    soup = BeautifulSoup(normalize_tables(BARE_TABLE), "html.parser")
    table = soup.find("table")

    assert table.parent.name == "figure"
    assert table.parent["class"] == ["wp-block-table"]
    assert len(table.thead.find_all("tr")) == 1
    assert len(table.tbody.find_all("tr")) == 2
    assert table.thead.th["style"] == TH_STYLE
    assert table.tbody.td["style"] == TD_STYLE
    assert "border-collapse" in table["style"]


def test_normalization_is_idempotent():
    once = normalize_tables(BARE_TABLE)
    assert normalize_tables(once) == once


def test_structured_table_untouched():
    html = "<table><thead><tr><th>A</th></tr></thead><tbody><tr><td>1</td></tr></tbody></table>"
    assert normalize_tables(html) == html


def test_no_table_returns_input():
    html = "<p>Just   text &amp; <b>markup</b></p>"
    assert normalize_tables(html) is html


def test_table_without_header_rows_gets_tbody_only():
    html = "<table><tr><td>1</td></tr></table>"
    soup = BeautifulSoup(normalize_tables(html), "html.parser")
    assert soup.find("thead") is None
    assert len(soup.find("tbody").find_all("tr")) == 1


def test_table_already_in_figure_not_wrapped_twice():
    html = f"<figure>{BARE_TABLE.split('</p>', 1)[1]}</figure>"
    soup = BeautifulSoup(normalize_tables(html), "html.parser")
    assert len(soup.find_all("figure")) == 1


def test_strip_html_comments():
    assert strip_html_comments("<p>a</p><!-- draft\nnote --><p>b</p>") == "<p>a</p><p>b</p>"


def test_render_article_html():
    text = "## Intro\n\nFirst line\nsecond line\n\n<!-- hidden -->\n\n```\ncode\n```"
    html = render_article_html(text)
    assert "<h2>Intro</h2>" in html
    assert "<br />" in html
    assert "hidden" not in html
    assert "<code>code" in html


def test_render_markdown_table_keeps_structure():
    text = "| Tool | Price |\n| --- | --- |\n| Trowel | $9 |"
    html = render_article_html(text)
    assert "<thead>" in html
    assert "<tbody>" in html
    assert render_article_html(text) == html


def test_render_empty_content():
    assert render_article_html(None) == ""
