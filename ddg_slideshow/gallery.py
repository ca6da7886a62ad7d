"""Discover full-resolution image URLs from the DuckDuckGo image gallery."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Callable, List, Optional, Sequence
from urllib.parse import quote_plus

from .browser import BrowserSession, open_playwright_session
from .config import (
    DETAIL_IMAGE_SELECTOR,
    SEARCH_URL_TEMPLATE,
    THUMBNAIL_SELECTOR,
    WRAPPER_ANCESTOR_DEPTH,
    SlideshowConfig,
)
from .errors import DiscoveryError, InvocationError
from .models import ImageCatalog

logger = logging.getLogger("ddg_slideshow.gallery")

SessionFactory = Callable[[SlideshowConfig], AsyncContextManager[BrowserSession]]


@dataclass
class DiscoveryStats:
    """Counters describing a discovery run."""

    thumbnails: int = 0
    skipped_thumbnails: int = 0
    skipped_sources: int = 0
    added: int = 0
    duplicates: int = 0


def clean_search_terms(search_terms: Sequence[str]) -> List[str]:
    """Drop blank terms and surrounding whitespace."""
    return [term.strip() for term in search_terms if term and term.strip()]


def require_search_terms(search_terms: Sequence[str]) -> List[str]:
    """Return the usable terms, raising InvocationError when there are none."""
    terms = clean_search_terms(search_terms)
    if not terms:
        raise InvocationError("You have to specify search terms as parameters.")
    return terms


def build_search_url(search_terms: Sequence[str]) -> str:
    """Return the image search URL for ``search_terms``."""
    terms = require_search_terms(search_terms)
    query = "+".join(quote_plus(term) for term in terms)
    return SEARCH_URL_TEMPLATE.format(query=query)


async def resolve_clickable_wrapper(
    session: BrowserSession,
    thumbnail: Any,
    depth: int = WRAPPER_ANCESTOR_DEPTH,
) -> Optional[Any]:
    """Walk ``depth`` parents up from a thumbnail to the element that opens it."""
    element = thumbnail
    for _ in range(depth):
        element = await session.parent(element)
        if element is None:
            return None
    return element


class GalleryExtractor:
    """Click through result thumbnails and collect their high-resolution URLs."""

    def __init__(
        self,
        config: SlideshowConfig,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self.config = config
        self._session_factory = session_factory or open_playwright_session
        self.stats = DiscoveryStats()

    async def discover(self, search_terms: Sequence[str]) -> ImageCatalog:
        """Search for ``search_terms`` and return a sealed catalog of image URLs.

        Raises :class:`DiscoveryError` when the browser cannot be launched, the
        page cannot be loaded, or no thumbnail shows up in time. Individual
        thumbnails that fail to open are skipped and counted on ``stats``.
        """
        url = build_search_url(search_terms)
        self.stats = DiscoveryStats()
        catalog = ImageCatalog()
        start = time.perf_counter()

        async with self._session_factory(self.config) as session:
            logger.info("Loading %s", url)
            await session.navigate(url)
            found = await session.wait_for(
                THUMBNAIL_SELECTOR, self.config.selector_timeout
            )
            thumbnails = await session.query_all(THUMBNAIL_SELECTOR) if found else []
            if not thumbnails:
                raise DiscoveryError(
                    DiscoveryError.NO_RESULTS,
                    f"No thumbnails matching {THUMBNAIL_SELECTOR!r} appeared "
                    f"within {self.config.selector_timeout:.0f}s",
                )
            self.stats.thumbnails = len(thumbnails)
            logger.info("Found %d thumbnails", len(thumbnails))

            for index, thumbnail in enumerate(thumbnails, start=1):
                if not await self._open_detail_view(session, thumbnail, index):
                    self.stats.skipped_thumbnails += 1
                    continue
                if not await self._collect_sources(session, catalog):
                    logger.debug("Thumbnail %d: no detail images readable", index)
                    self.stats.skipped_thumbnails += 1

        catalog.seal()
        logger.info(
            "Discovered %d images in %.2fs (%d thumbnails skipped, %d duplicates)",
            len(catalog),
            time.perf_counter() - start,
            self.stats.skipped_thumbnails,
            self.stats.duplicates,
        )
        return catalog

    async def _open_detail_view(
        self, session: BrowserSession, thumbnail: Any, index: int
    ) -> bool:
        wrapper = await resolve_clickable_wrapper(session, thumbnail)
        if wrapper is None:
            logger.debug("Thumbnail %d: no clickable wrapper", index)
            return False
        if not await session.click(wrapper):
            logger.debug("Thumbnail %d: click failed", index)
            return False
        if not await session.wait_for(DETAIL_IMAGE_SELECTOR, self.config.detail_timeout):
            logger.debug("Thumbnail %d: detail view did not open", index)
            return False
        return True

    async def _collect_sources(
        self, session: BrowserSession, catalog: ImageCatalog
    ) -> bool:
        images = await session.query_all(DETAIL_IMAGE_SELECTOR)
        for image in images:
            src = await session.attribute(image, "src")
            if not src:
                self.stats.skipped_sources += 1
                continue
            if catalog.add(src):
                self.stats.added += 1
            else:
                self.stats.duplicates += 1
        return bool(images)
