# ABOUTME: Tests for the article extraction service end to end on raw HTML.
# ABOUTME: Checks image references, heading ids and the guarantees on the cleaned output.

import hashlib
import re

import pytest
from conftest import LOREM, PAGE_URL, paragraphs

from paperoni.errors import ReadabilityError
from paperoni.readability import dom
from paperoni.readability.extractor import PRESENTATIONAL_ATTRIBUTES
from paperoni.services.extractor import collect_image_refs, extract_article

SIMPLE_ARTICLE = (
    '<html lang="en"><body><article><h1>Starting out</h1>'
    "<p>Some Lorem Ipsum text here</p><p>Observe this picture</p>"
    '<img src="./img.jpg" alt="Random image"><img src="data:image/png;base64,AAAA">'
    "</article></body></html>"
)


def _header_id(text: str) -> str:
    return "_" + hashlib.md5(text.encode(), usedforsecurity=False).hexdigest()


def test_simple_article(settings):
    article = extract_article(SIMPLE_ARTICLE, "http://example.com/", settings)

    assert article.image_refs == [("http://example.com/img.jpg", None)]
    assert article.metadata.title != ""
    assert len(article.content_root.find_all("img")) == 1
    assert article.source_url == "http://example.com/"


def test_page_without_body_raises(settings):
    with pytest.raises(ReadabilityError):
        extract_article("<html><head><title>Empty</title></head></html>", PAGE_URL, settings)


def test_output_guarantees(settings, make_page):
    html = make_page(
        "<script>track()</script><style>p {}</style>"
        '<article class="post" style="margin: 0">'
        "<h2>Intro</h2>"
        f"{paragraphs(3)}"
        '<h3 id="Bad Id!">Details</h3>'
        f'<p align="center">{LOREM}</p>'
        '<h4 id="kept-id">Notes</h4>'
        f"<p>{LOREM}</p>"
        "<noscript><p>Enable JavaScript</p></noscript>"
        '<iframe src="https://tracker.example.com/pixel"></iframe>'
        '<iframe src="https://www.youtube.com/embed/abc"></iframe>'
        '<p hidden>Invisible text</p>'
        "</article>"
    )
    article = extract_article(html, PAGE_URL, settings)
    root = article.content_root

    for tag in ("script", "style", "noscript", "form", "h1"):
        assert root.find(tag) is None
    assert [iframe["src"] for iframe in root.find_all("iframe")] == [
        "https://www.youtube.com/embed/abc"
    ]
    for node in [root, *root.find_all(True)]:
        assert dom.is_probably_visible(node)
        if node.name != "svg":
            assert not set(PRESENTATIONAL_ATTRIBUTES) & set(node.attrs)

    headers = root.find_all(["h1", "h2", "h3", "h4"])
    assert headers
    for header in headers:
        assert re.fullmatch(r"[a-z0-9_-]+", header["id"])
    assert root.find("h2")["id"] == _header_id("Intro")
    assert root.find("h4")["id"] == "kept-id"
    assert "Invisible text" not in root.get_text()


def test_collect_image_refs_filters_and_dedupes():
    root = dom.parse_html(
        "<div>"
        '<img src="http://example.com/a.png">'
        '<img src="http://example.com/a.png">'
        "<img>"
        '<img srcset="http://example.com/b.png 1x, http://example.com/b2.png 2x">'
        '<img src="data:image/gif;base64,R0lGOD">'
        '<img src="data:image/svg+xml,%3Csvg%3E">'
        "</div>"
    ).div
    refs = collect_image_refs(root)

    assert refs == [("http://example.com/a.png", None), ("http://example.com/b.png", None)]
    srcs = [img["src"] for img in root.find_all("img")]
    assert srcs == [
        "http://example.com/a.png",
        "http://example.com/a.png",
        "http://example.com/b.png",
        "data:image/svg+xml,%3Csvg%3E",
    ]
