# ABOUTME: Shared test fixtures for paperoni.
# ABOUTME: Provides settings rooted in tmp_path, HTML page builders and sample articles.

from collections.abc import Callable

import pytest

from paperoni.config import Settings
from paperoni.models import Article, MetaData
from paperoni.readability import dom

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat."
)
PAGE_TITLE = "A Test Article About Paperoni Extraction"
PAGE_URL = "http://example.com/articles/paperoni"


def paragraphs(count: int = 5) -> str:
    return "".join(f"<p>{LOREM}</p>" for _ in range(count))


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with images stored under tmp_path."""
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    return Settings(image_dir=image_dir, log_dir=tmp_path / "logs")


@pytest.fixture
def make_page() -> Callable[..., str]:
    """Build a full HTML document around some body markup."""

    def _make_page(body: str, title: str = PAGE_TITLE, head: str = "") -> str:
        return f"<html><head><title>{title}</title>{head}</head><body>{body}</body></html>"

    return _make_page


@pytest.fixture
def make_article() -> Callable[..., Article]:
    """Build an already extracted Article without running the extractor."""

    def _make_article(
        title: str = PAGE_TITLE,
        url: str = PAGE_URL,
        body: str | None = None,
        image_refs: list | None = None,
    ) -> Article:
        body = body if body is not None else f"<h2>Overview</h2>{paragraphs(2)}"
        content_root = dom.parse_html(
            f'<div id="readability-page-1" class="page">{body}</div>'
        ).div
        return Article(
            content_root=content_root,
            metadata=MetaData(title=title, byline="Jane Doe"),
            source_url=url,
            image_refs=image_refs or [],
        )

    return _make_article
