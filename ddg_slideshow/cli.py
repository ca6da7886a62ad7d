"""Command-line entry point for the DuckDuckGo slideshow."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from .config import (
    DEFAULT_DETAIL_TIMEOUT,
    DEFAULT_DOWNLOAD_INTERVAL,
    DEFAULT_SELECTOR_TIMEOUT,
    DEFAULT_SLIDE_INTERVAL,
    SlideshowConfig,
)
from .download import DownloadWorker
from .errors import DiscoveryError, InvocationError
from .gallery import GalleryExtractor, require_search_terms
from .slideshow import SlideRenderer, notify_error, window_title

logger = logging.getLogger("ddg_slideshow.cli")

EXIT_DISCOVERY_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Search DuckDuckGo Images and show the results as a full-screen slideshow.",
    )
    parser.add_argument("terms", nargs="*", help="Search terms")
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_SLIDE_INTERVAL,
        help="Seconds between slides",
    )
    parser.add_argument(
        "--throttle",
        type=float,
        default=DEFAULT_DOWNLOAD_INTERVAL,
        help="Seconds to pause between image downloads",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_SELECTOR_TIMEOUT,
        help="Seconds to wait for search results to appear",
    )
    parser.add_argument(
        "--detail-timeout",
        type=float,
        default=DEFAULT_DETAIL_TIMEOUT,
        help="Seconds to wait for a thumbnail's detail view to open",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="Per-image HTTP timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window while searching",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        terms = require_search_terms(args.terms)
    except InvocationError as exc:
        notify_error("Missing Parameters", str(exc))
        return EXIT_USAGE

    config = SlideshowConfig(
        headless=not args.headed,
        selector_timeout=args.timeout,
        detail_timeout=args.detail_timeout,
        download_interval=args.throttle,
        request_timeout=args.request_timeout,
        slide_interval=args.interval,
    )

    extractor = GalleryExtractor(config)
    try:
        catalog = asyncio.run(extractor.discover(terms))
    except (DiscoveryError, PlaywrightError) as exc:
        notify_error(
            "Error",
            f"An error occurred while querying DuckDuckGo for images.\n{exc}",
        )
        return EXIT_DISCOVERY_FAILED

    worker = DownloadWorker(catalog, config)
    worker.start()
    renderer = SlideRenderer(catalog, config, window_title(terms), worker=worker)
    try:
        renderer.run()
    finally:
        worker.cancel()
        worker.join(timeout=1.0)
        logger.debug(
            "Download worker: %d succeeded, %d failed",
            worker.stats.succeeded,
            worker.stats.failed,
        )
    return 0

