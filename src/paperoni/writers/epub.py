# ABOUTME: EPUB export of extracted articles using ebooklib.
# ABOUTME: Writes one book per article or a single merged book with a source appendix.

import hashlib
from pathlib import Path

import structlog
from ebooklib import epub

from paperoni.config import Settings, get_settings
from paperoni.errors import EpubError, PaperoniError, StorageError
from paperoni.models import AppConfig, Article
from paperoni.writers.common import WriteReport, epub_css, merged_path, safe_title, unique_path
from paperoni.writers.xhtml import TocEntry, build_toc, escape, serialize

log = structlog.get_logger()

APPENDIX_FILE = "appendix.xhtml"


def _toc_items(entries: list[TocEntry]) -> list:
    items = []
    for entry in entries:
        digest = hashlib.md5(entry.href.encode("utf-8"), usedforsecurity=False).hexdigest()
        uid = f"toc_{digest}"
        link = epub.Link(entry.href, entry.title, uid)
        items.append((link, _toc_items(entry.children)) if entry.children else link)
    return items


def _appendix(articles: list[Article], css_item: epub.EpubItem, title: str) -> epub.EpubHtml:
    links = "".join(
        f'<a href="{escape(article.source_url)}">{escape(article.title)}</a><br></br>'
        for article in articles
    )
    appendix = epub.EpubHtml(title=title, file_name=APPENDIX_FILE, lang="en")
    appendix.content = f"<h2>Appendix</h2><h3>Article sources</h3>{links}"
    appendix.add_item(css_item)
    return appendix


def _new_book(title: str, identifier: str) -> tuple[epub.EpubBook, epub.EpubItem]:
    book = epub.EpubBook()
    digest = hashlib.md5(identifier.encode("utf-8"), usedforsecurity=False).hexdigest()
    book.set_identifier(f"urn:paperoni:{digest}")
    book.set_title(title)
    book.set_language("en")
    css_item = epub.EpubItem(
        uid="stylesheet", file_name="stylesheet.css", media_type="text/css", content=epub_css()
    )
    book.add_item(css_item)
    return book, css_item


def _add_images(book: epub.EpubBook, article: Article, image_dir: Path, added: set[str]) -> None:
    """Add the article's images not already in the book, all or none."""
    images: dict[str, tuple[str | None, bytes]] = {}
    for filename, mime in article.image_refs:
        if filename in added or filename in images:
            continue
        try:
            content = (image_dir / filename).read_bytes()
        except OSError as e:
            raise StorageError(f"Unable to read image {filename}: {e}", article.source_url) from e
        images[filename] = (mime, content)

    for filename, (mime, content) in images.items():
        book.add_item(
            epub.EpubImage(
                uid=f"img_{Path(filename).stem}",
                file_name=filename,
                media_type=mime or "image/*",
                content=content,
            )
        )
        added.add(filename)


def _chapter(
    article: Article, file_name: str, css_item: epub.EpubItem
) -> tuple[epub.EpubHtml, list]:
    toc = _toc_items(build_toc(article.content_root, file_name))
    chapter = epub.EpubHtml(title=article.title, file_name=file_name, lang="en")
    chapter.content = serialize(article.content_root)
    chapter.add_item(css_item)
    if article.metadata.direction:
        chapter.direction = article.metadata.direction
    return chapter, toc


def _finish(book: epub.EpubBook, chapters: list, toc: list, inline_toc: bool, path: Path) -> None:
    book.toc = toc
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = (["nav"] if inline_toc else []) + chapters
    try:
        epub.write_epub(str(path), book)
    except OSError as e:
        raise StorageError(f"Unable to write {path}: {e}") from e
    except Exception as e:
        raise EpubError(f"Unable to generate {path}: {e}") from e


def write_single_epubs(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    settings = settings or get_settings()
    report = WriteReport()
    output_dir = app_config.output_directory or Path(".")
    taken: set[Path] = set()

    for article in articles:
        path = unique_path(output_dir, safe_title(article), ".epub", taken)
        log.debug("creating_epub", path=str(path))
        try:
            book, css_item = _new_book(article.title, article.source_url)
            if article.metadata.byline:
                book.add_author(article.metadata.byline)
            chapter, headings = _chapter(article, "index.xhtml", css_item)
            book.add_item(chapter)
            _add_images(book, article, settings.image_dir, set())
            appendix = _appendix([article], css_item, "Article Source")
            book.add_item(appendix)
            link = epub.Link("index.xhtml", article.title, "index")
            toc = [
                (link, headings) if headings else link,
                epub.Link(APPENDIX_FILE, "Article Source", "appendix"),
            ]
            _finish(book, [chapter, appendix], toc, app_config.inline_toc, path)
        except PaperoniError as e:
            e.set_article_source(article.source_url)
            log.error("epub_failed", url=article.source_url, error=str(e))
            report.errors.append(e)
            continue
        log.info("epub_created", path=str(path))
        report.written.append(article.title)
    return report


def write_merged_epub(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    settings = settings or get_settings()
    report = WriteReport()
    path = merged_path(app_config.merged, ".epub")
    book, css_item = _new_book(path.stem, str(path))

    chapters = []
    toc = []
    included: list[Article] = []
    added_images: set[str] = set()
    for idx, article in enumerate(articles):
        file_name = f"article_{idx}.xhtml"
        try:
            chapter, headings = _chapter(article, file_name, css_item)
            _add_images(book, article, settings.image_dir, added_images)
        except PaperoniError as e:
            e.set_article_source(article.source_url)
            log.error("epub_article_failed", url=article.source_url, error=str(e))
            report.errors.append(e)
            continue
        book.add_item(chapter)
        chapters.append(chapter)
        link = epub.Link(file_name, article.title, f"article_{idx}")
        toc.append((link, headings) if headings else link)
        included.append(article)

    appendix = _appendix(included, css_item, "Article Sources")
    book.add_item(appendix)
    chapters.append(appendix)
    toc.append(epub.Link(APPENDIX_FILE, "Article Sources", "appendix"))

    try:
        _finish(book, chapters, toc, app_config.inline_toc, path)
    except PaperoniError as e:
        log.error("merged_epub_failed", path=str(path), error=str(e))
        # Nothing was written, so every article counts as failed.
        for article in included:
            report.errors.append(type(e)(e.message, article.source_url))
        return report

    log.info("epub_created", path=str(path), articles=len(included))
    report.written.extend(article.title for article in included)
    return report


def write_epubs(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    if not articles:
        return WriteReport()
    if app_config.merged:
        return write_merged_epub(articles, app_config, settings)
    return write_single_epubs(articles, app_config, settings)
