"""Command-line entry point for the wiki image crawler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_START_URL,
    CrawlConfig,
)
from .crawler import run_crawler
from .fetcher import HttpFetcher
from .images import Downloader
from .models import CrawlState, RenameState
from .rename import format_preview, is_affirmative, rename_sequentially
from .utils import accept_all, resolution_filter

logger = logging.getLogger("wikigallery.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return ("crawl",)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("crawl", *argv)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _add_crawl_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start-url",
        default=DEFAULT_START_URL,
        help="Category page to start crawling from",
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help="Site root used to resolve relative links",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_DOWNLOAD_DIR,
        type=Path,
        help="Directory where images should be written",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=1.0,
        help="Seconds to wait between listing pages",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Connect and read timeout in seconds for each request",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=None,
        help="Cap on simultaneous downloads per page (default: one per image)",
    )
    parser.add_argument(
        "--resolution",
        default=None,
        metavar="WxH",
        help="Only keep image URLs mentioning this resolution, e.g. 1024x576",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_rename_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "directory",
        nargs="?",
        default=DEFAULT_DOWNLOAD_DIR,
        type=Path,
        help="Directory whose files should be renamed (default: img)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download full-resolution images from a wiki category and number them.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl_parser = subparsers.add_parser(
        "crawl", help="Crawl a category listing and download its images"
    )
    _add_crawl_arguments(crawl_parser)

    rename_parser = subparsers.add_parser(
        "rename", help="Rename downloaded files to 001.ext, 002.ext, ..."
    )
    _add_rename_arguments(rename_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig(
        base_url=args.base_url,
        start_url=args.start_url,
        download_dir=Path(args.output),
        connect_timeout=args.timeout,
        read_timeout=args.timeout,
        page_delay=args.delay,
        max_workers=args.max_workers,
        image_filter=resolution_filter(args.resolution) if args.resolution else accept_all,
    )


def _run_crawl(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)
    config = build_config(args)

    logger.info("Starting image download from %s", config.start_url)
    logger.info("Target size: %s", args.resolution or "any")
    logger.info("Download directory: %s", config.download_dir)

    overall_start = time.perf_counter()
    with HttpFetcher(config) as fetcher:
        downloader = Downloader(fetcher, config.download_dir, config.base_url)
        result = asyncio.run(run_crawler(config, fetcher, downloader))
    total_elapsed = time.perf_counter() - overall_start

    logger.info(
        "Finished in %.2fs (%d pages, %d images: %d downloaded, %d skipped, %d failed)",
        total_elapsed,
        result.pages_processed,
        result.images_found,
        result.succeeded,
        result.skipped,
        result.failed,
    )
    if result.state is CrawlState.ABORTED:
        logger.error("Crawl aborted: %s", result.error)
        return 1
    return 0


def _prompt_confirmation(plan: List[Tuple[Path, Path]]) -> bool:
    print(f"{len(plan)} files will be renamed in this order:")
    for line in format_preview(plan):
        print(f"  {line}")
    try:
        answer = input("Proceed? [y/N] ")
    except EOFError:
        return False
    return is_affirmative(answer)


def _run_rename(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)
    directory = Path(args.directory)
    if not directory.is_dir():
        logger.error("Directory does not exist: %s", directory)
        return 1
    result = rename_sequentially(directory, _prompt_confirmation)
    return 1 if result.state is RenameState.FAILED else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.command == "crawl":
        return _run_crawl(args)
    return _run_rename(args)


if __name__ == "__main__":
    sys.exit(main())
