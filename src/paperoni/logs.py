# ABOUTME: Logging setup and the end-of-run download summary.
# ABOUTME: Configures structlog for stderr or a timestamped log file and renders rich tables.

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog
from rich.console import Console
from rich.table import Table

from paperoni.config import Settings, get_settings
from paperoni.errors import CliError, PaperoniError

log = structlog.get_logger()

VERBOSITY_LEVELS = {
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}


def log_level(verbosity: int, log_to_file: bool) -> int:
    if verbosity <= 0:
        return logging.DEBUG if log_to_file else logging.CRITICAL
    return VERBOSITY_LEVELS[min(verbosity, 4)]


def init_logging(
    verbosity: int, log_to_file: bool, settings: Settings | None = None
) -> Path | None:
    """Configure structlog. Returns the log file path when logging to a file."""
    settings = settings or get_settings()
    level = log_level(verbosity, log_to_file)
    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
    ]
    log_path = None

    if log_to_file:
        try:
            settings.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CliError(f"Unable to create log directory {settings.log_dir}: {e}") from e
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_path = settings.log_dir / f"paperoni_{timestamp}.log"
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a", encoding="utf-8"))
        processors.append(
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])
        )
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )
    return log_path


@dataclass
class DownloadCount:
    total: int
    successful: int
    partial: int
    failed: int


def _noun(count: int) -> str:
    return "article" if count == 1 else "articles"


def short_summary(count: DownloadCount) -> str:
    """One line describing how many articles succeeded, partially failed and failed."""
    if count.total != count.successful + count.partial + count.failed:
        raise ValueError("total must equal the sum of successful, partial and failed counts")

    if count.successful == count.total:
        return (
            "Article downloaded successfully"
            if count.total == 1
            else "All articles downloaded successfully"
        )
    if count.failed == count.total:
        return (
            "Article failed to download"
            if count.total == 1
            else "All articles failed to download"
        )
    if count.partial == count.total:
        return (
            "Article partially failed to download"
            if count.total == 1
            else "All articles partially failed to download"
        )

    parts = []
    if count.successful:
        parts.append(f"{count.successful} {_noun(count.successful)} downloaded successfully")
    if count.partial:
        parts.append(f"{count.partial} {_noun(count.partial)} partially failed to download")
    if count.failed:
        parts.append(f"{count.failed} {_noun(count.failed)} failed")
    return ", ".join(parts)


def _summary_style(count: DownloadCount) -> str:
    if count.successful == count.total:
        return "bold green"
    if count.failed == count.total:
        return "bold red"
    return "bold yellow"


def display_summary(
    count: DownloadCount,
    titles: list[str],
    errors: list[PaperoniError],
    merged: bool = False,
    console: Console | None = None,
) -> None:
    console = console or Console()
    console.print(short_summary(count), style=_summary_style(count))

    if titles:
        table = Table(show_lines=False)
        table.add_column("Table of Contents" if merged else "Downloaded articles", style="green")
        for title in titles:
            table.add_row(title)
        console.print(table)

    if errors:
        console.print("\nFailed article downloads", style="bold bright_red")
        failed = Table()
        failed.add_column("Link", justify="center")
        failed.add_column("Reason", justify="center")
        for error in errors:
            source = error.article_source or "<unknown link>"
            failed.add_row(source, error.kind)
            log.error("article_failed", source=source, error=str(error))
        console.print(failed)
