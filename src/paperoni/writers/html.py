# ABOUTME: Standalone HTML export of extracted articles.
# ABOUTME: Inlines the stylesheet, appends a source appendix and copies or embeds images.

import base64
import shutil
from pathlib import Path

import structlog
from bs4 import BeautifulSoup

from paperoni.config import Settings, get_settings
from paperoni.errors import PaperoniError, StorageError
from paperoni.models import AppConfig, Article
from paperoni.readability import dom
from paperoni.writers.common import WriteReport, load_css, merged_path, safe_title, unique_path

log = structlog.get_logger()

BASE_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
</head>
<body></body>
</html>"""


def new_document(title: str, app_config: AppConfig) -> BeautifulSoup:
    doc = dom.parse_html(BASE_HTML_TEMPLATE)
    title_tag = dom.new_tag(doc, "title")
    title_tag.string = title
    doc.head.append(title_tag)
    css = load_css(app_config.css_config)
    if css:
        style = dom.new_tag(doc, "style")
        style.string = css
        doc.head.append(style)
    return doc


def insert_appendix(doc: BeautifulSoup, articles: list[Article]) -> None:
    footer = dom.new_tag(doc, "footer")
    heading = dom.new_tag(doc, "h2")
    heading.string = "Appendix"
    footer.append(heading)
    sources = dom.new_tag(doc, "h3")
    sources.string = "Article sources"
    footer.append(sources)
    for article in articles:
        link = dom.new_tag(doc, "a", {"href": article.source_url})
        link.string = article.title
        footer.append(link)
        footer.append(dom.new_tag(doc, "br"))
    doc.body.append(footer)


def _rewrite_img_src(article: Article, filename: str, new_src: str) -> None:
    for img in article.content_root.find_all("img", src=filename):
        img["src"] = new_src


def inline_images(article: Article, image_dir: Path) -> None:
    """Replace local image references with base64 data URLs."""
    for filename, mime in article.image_refs:
        try:
            data = (image_dir / filename).read_bytes()
        except OSError as e:
            raise StorageError(f"Unable to read image {filename}: {e}", article.source_url) from e
        encoded = base64.b64encode(data).decode("ascii")
        _rewrite_img_src(article, filename, f"data:{mime or 'image/*'};base64,{encoded}")


def copy_images(article: Article, image_dir: Path, target_dir: Path) -> None:
    """Copy the article's images next to the HTML file and point <img> tags at them."""
    if not article.image_refs:
        return
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        for filename, _ in article.image_refs:
            shutil.copyfile(image_dir / filename, target_dir / filename)
            _rewrite_img_src(article, filename, f"{target_dir.name}/{filename}")
    except OSError as e:
        raise StorageError(f"Unable to copy images to {target_dir}: {e}", article.source_url) from e


def _place_images(
    article: Article, app_config: AppConfig, image_dir: Path, target_dir: Path
) -> None:
    if app_config.inline_images:
        inline_images(article, image_dir)
    else:
        copy_images(article, image_dir, target_dir)


def _write(doc: BeautifulSoup, path: Path) -> None:
    try:
        path.write_text(str(doc), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Unable to write {path}: {e}") from e


def write_single_html(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    settings = settings or get_settings()
    report = WriteReport()
    output_dir = app_config.output_directory or Path(".")
    taken: set[Path] = set()

    for article in articles:
        path = unique_path(output_dir, safe_title(article), ".html", taken)
        try:
            _place_images(article, app_config, settings.image_dir, output_dir / path.stem)
            doc = new_document(article.title, app_config)
            if article.metadata.direction:
                doc.html["dir"] = article.metadata.direction
            doc.body.append(article.content_root)
            insert_appendix(doc, [article])
            _write(doc, path)
        except PaperoniError as e:
            e.set_article_source(article.source_url)
            log.error("html_failed", url=article.source_url, error=str(e))
            report.errors.append(e)
            continue
        log.info("html_created", path=str(path))
        report.written.append(article.title)
    return report


def write_merged_html(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    settings = settings or get_settings()
    report = WriteReport()
    path = merged_path(app_config.merged, ".html")
    doc = new_document(path.stem, app_config)
    images_dir = path.parent / path.stem

    included: list[Article] = []
    for idx, article in enumerate(articles, start=1):
        try:
            _place_images(article, app_config, settings.image_dir, images_dir)
        except PaperoniError as e:
            e.set_article_source(article.source_url)
            log.error("html_article_failed", url=article.source_url, error=str(e))
            report.errors.append(e)
            continue
        article.content_root["id"] = f"readability-page-{idx}"
        doc.body.append(article.content_root)
        included.append(article)
        log.debug("html_article_added", url=article.source_url, path=str(path))

    insert_appendix(doc, included)
    try:
        _write(doc, path)
    except PaperoniError as e:
        log.error("merged_html_failed", path=str(path), error=str(e))
        for article in included:
            report.errors.append(type(e)(e.message, article.source_url))
        return report

    log.info("html_created", path=str(path), articles=len(included))
    report.written.extend(article.title for article in included)
    return report


def write_html(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    if not articles:
        return WriteReport()
    if app_config.merged:
        return write_merged_html(articles, app_config, settings)
    return write_single_html(articles, app_config, settings)
