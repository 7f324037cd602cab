# ABOUTME: Batch orchestration: fetch pages, extract articles, download images, export.
# ABOUTME: Collects per-article failures and reports successful, partial and failed counts.

from dataclasses import dataclass, field

import httpx
import structlog
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from paperoni.config import Settings, get_settings
from paperoni.errors import PaperoniError
from paperoni.logs import DownloadCount, display_summary
from paperoni.models import AppConfig, Article, DownloadStatus, ExportType
from paperoni.services.extractor import extract_article
from paperoni.services.fetcher import fetch_all, make_client
from paperoni.services.images import download_images
from paperoni.writers.common import WriteReport
from paperoni.writers.epub import write_epubs
from paperoni.writers.html import write_html

log = structlog.get_logger()


@dataclass
class DownloadResult:
    """Extracted articles, in the order their URLs were given, and the failed ones."""

    articles: list[Article] = field(default_factory=list)
    errors: list[PaperoniError] = field(default_factory=list)


def _progress(app_config: AppConfig, console: Console | None) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        disable=app_config.can_disable_progress_bar,
    )


async def _download(
    app_config: AppConfig,
    client: httpx.AsyncClient,
    settings: Settings,
    progress: Progress,
) -> DownloadResult:
    result = DownloadResult()
    ordered: list[tuple[int, Article]] = []
    position = {url: idx for idx, url in enumerate(app_config.urls)}
    task = progress.add_task("Downloading articles", total=len(app_config.urls))

    async for fetched in fetch_all(client, app_config.urls, app_config.max_conn, settings):
        if fetched.error is not None:
            result.errors.append(fetched.error)
            progress.advance(task)
            continue

        log.debug("extracting_article", url=fetched.url)
        progress.update(task, description=f"Extracting {fetched.url}")
        try:
            article = extract_article(fetched.html, fetched.effective_url, settings)
        except PaperoniError as e:
            e.set_article_source(fetched.url)
            log.warning("extraction_failed", url=fetched.url, error=str(e))
            result.errors.append(e)
            progress.advance(task)
            continue

        progress.update(task, description=f"Downloading images for {fetched.url}")
        await download_images(article, client, settings)
        ordered.append((position[fetched.url], article))
        progress.advance(task)

    progress.update(task, description="Downloaded articles")
    result.articles = [article for _, article in sorted(ordered, key=lambda item: item[0])]
    return result


async def download_articles(
    app_config: AppConfig,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    console: Console | None = None,
) -> DownloadResult:
    """Fetch and extract every configured URL. Failures are collected, never raised."""
    settings = settings or get_settings()
    with _progress(app_config, console) as progress:
        if client is not None:
            return await _download(app_config, client, settings, progress)
        async with make_client(settings) as own_client:
            return await _download(app_config, own_client, settings, progress)


def write_articles(
    articles: list[Article], app_config: AppConfig, settings: Settings | None = None
) -> WriteReport:
    if app_config.export_type is ExportType.HTML:
        return write_html(articles, app_config, settings)
    return write_epubs(articles, app_config, settings)


def count_downloads(
    app_config: AppConfig, result: DownloadResult, report: WriteReport
) -> DownloadCount:
    failed_sources = {error.article_source for error in report.errors}
    partial = sum(
        1
        for article in result.articles
        if article.status is DownloadStatus.PARTIAL and article.source_url not in failed_sources
    )
    failed = len(result.errors) + len(report.errors)
    total = len(app_config.urls)
    return DownloadCount(
        total=total, successful=total - partial - failed, partial=partial, failed=failed
    )


async def run(
    app_config: AppConfig,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    console: Console | None = None,
) -> int:
    """Download, export and summarise. Returns the process exit code."""
    result = await download_articles(app_config, settings, client, console)
    report = write_articles(result.articles, app_config, settings)
    count = count_downloads(app_config, result, report)

    log.info(
        "run_complete",
        successful=count.successful,
        partial=count.partial,
        failed=count.failed,
    )
    display_summary(
        count,
        report.written,
        result.errors + report.errors,
        merged=bool(app_config.merged),
        console=console,
    )
    return 0 if count.successful == count.total else 1
