# ABOUTME: CLI entry point for paperoni.
# ABOUTME: Validates arguments, sets up logging and runs the download pipeline.

import asyncio
import sys

import structlog

from paperoni.cli import build_app_config, build_parser
from paperoni.errors import CliError
from paperoni.logs import init_logging
from paperoni.services.downloader import run

log = structlog.get_logger()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        app_config = build_app_config(args)
        log_path = init_logging(app_config.verbosity, app_config.log_to_file)
    except CliError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    log.info("starting_download", urls=len(app_config.urls), log_file=str(log_path or ""))
    sys.exit(asyncio.run(run(app_config)))


if __name__ == "__main__":
    main()
