# ABOUTME: Command-line argument parsing and validation into an AppConfig.
# ABOUTME: Every invalid combination raises CliError before any network activity.

import argparse
from pathlib import Path

from paperoni.config import Settings, get_settings
from paperoni.errors import CliError
from paperoni.models import AppConfig, CssConfig, ExportType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paperoni",
        description="Download web articles and save them as EPUB or HTML files.",
    )
    parser.add_argument("urls", nargs="*", help="URLs of web articles")
    parser.add_argument("-f", "--file", type=Path, help="file with one URL per line")
    parser.add_argument(
        "-o", "--output-directory", type=Path, help="directory to store the exported files in"
    )
    parser.add_argument("--merge", metavar="NAME", help="merge all articles into one file NAME")
    parser.add_argument(
        "--max-conn",
        metavar="N",
        help="maximum number of concurrent HTTP connections (default: 8)",
    )
    parser.add_argument(
        "--export",
        choices=[t.value for t in ExportType],
        default=ExportType.EPUB.value,
        help="output format (default: epub)",
    )
    parser.add_argument(
        "--inline-toc", action="store_true", help="add a table of contents page (epub only)"
    )
    parser.add_argument(
        "--inline-images", action="store_true", help="embed images as base64 (html only)"
    )
    parser.add_argument("--no-css", action="store_true", help="export without any styles")
    parser.add_argument(
        "--no-header-css", action="store_true", help="export without header styles"
    )
    parser.add_argument(
        "-v",
        dest="verbosity",
        action="count",
        default=0,
        help="log to stderr; repeat up to -vvvv for error, warn, info and debug",
    )
    parser.add_argument(
        "--log-to-file", action="store_true", help="write logs to ~/.paperoni/logs instead"
    )
    return parser


def read_urls_file(path: Path) -> list[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CliError(f"Unable to read URLs from {path}: {e}") from e
    return [line.strip() for line in content.splitlines() if line.strip()]


def _max_conn(value: str | None, settings: Settings) -> int:
    if value is None:
        return settings.max_conn
    try:
        max_conn = int(value)
    except ValueError as e:
        raise CliError(f"--max-conn must be a positive integer, got {value!r}") from e
    if max_conn <= 0:
        raise CliError(f"--max-conn must be a positive integer, got {value!r}")
    return max_conn


def _css_config(args: argparse.Namespace) -> CssConfig:
    if args.no_css and args.no_header_css:
        raise CliError("--no-css and --no-header-css cannot be used together")
    if args.no_css:
        return CssConfig.NONE
    if args.no_header_css:
        return CssConfig.NO_HEADERS
    return CssConfig.ALL


def build_app_config(args: argparse.Namespace, settings: Settings | None = None) -> AppConfig:
    """Validate parsed arguments. Raises CliError on any invalid setting."""
    settings = settings or get_settings()

    urls = list(args.urls)
    if args.file is not None:
        urls.extend(read_urls_file(args.file))
    urls = list(dict.fromkeys(url.strip() for url in urls if url.strip()))
    if not urls:
        raise CliError("No urls were provided")

    export_type = ExportType(args.export)

    if args.output_directory is not None:
        if args.merge:
            raise CliError("--output-directory cannot be used with --merge")
        if not args.output_directory.is_dir():
            raise CliError(f"{args.output_directory} is not an existing directory")

    if args.inline_toc and export_type is not ExportType.EPUB:
        raise CliError("--inline-toc can only be used with epub exports")

    if args.inline_images and export_type is not ExportType.HTML:
        raise CliError("--inline-images can only be used with html exports")

    return AppConfig(
        urls=urls,
        max_conn=_max_conn(args.max_conn, settings),
        merged=args.merge,
        output_directory=args.output_directory,
        export_type=export_type,
        inline_toc=args.inline_toc,
        inline_images=args.inline_images,
        css_config=_css_config(args),
        verbosity=args.verbosity,
        log_to_file=args.log_to_file,
    )
