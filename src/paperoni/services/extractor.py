# ABOUTME: Article extraction service built on the readability engine.
# ABOUTME: Turns downloaded HTML into an Article with clean content, metadata and image references.

import structlog
from bs4 import Tag

from paperoni.config import Settings
from paperoni.models import Article, ImageRef
from paperoni.readability.extractor import Readability
from paperoni.writers.xhtml import generate_header_ids

log = structlog.get_logger()


def _data_url_mime(src: str) -> str:
    header = src[len("data:") :].split(",", 1)[0]
    return header.split(";", 1)[0].strip().lower()


def collect_image_refs(content_root: Tag) -> list[ImageRef]:
    """Drop unusable <img> elements and list the remaining sources in document order.

    Images without a src, or with an inline data: src other than SVG, are removed.
    Inline SVGs stay in the tree but are not listed since there is nothing to download.
    """
    refs: list[ImageRef] = []
    seen: set[str] = set()
    for img in content_root.find_all("img"):
        src = (img.get("src") or "").strip()
        if not src and img.get("srcset"):
            src = img["srcset"].strip().split(",")[0].split()[0]
            img["src"] = src
        if not src:
            img.extract()
            continue
        if src.lower().startswith("data:"):
            if _data_url_mime(src) != "image/svg+xml":
                img.extract()
            continue
        if src not in seen:
            seen.add(src)
            refs.append((src, None))
    return refs


def extract_article(html: str, url: str, settings: Settings | None = None) -> Article:
    """Extract the readable article from a page.

    Raises ReadabilityError when the page has no body or no usable content.
    """
    reader = Readability(html, url, settings)
    content_root = reader.parse()
    image_refs = collect_image_refs(content_root)
    generate_header_ids(content_root)

    log.info(
        "article_extracted",
        url=url,
        title=reader.metadata.title,
        images=len(image_refs),
    )
    return Article(
        content_root=content_root,
        metadata=reader.metadata,
        source_url=url,
        image_refs=image_refs,
    )
