"""Browser capability seam used by gallery discovery.

Discovery only needs a handful of operations on a live page: navigate, wait
for a selector, query elements, step to a parent, click and read an
attribute. :class:`BrowserSession` names them so the traversal logic can be
exercised without a real browser, and :class:`PlaywrightSession` provides
them on top of a headless Chromium page.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional, Protocol, runtime_checkable

from playwright.async_api import (
    ElementHandle,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import SlideshowConfig
from .errors import DiscoveryError

logger = logging.getLogger("ddg_slideshow.browser")


@runtime_checkable
class BrowserSession(Protocol):
    """Operations discovery performs against a rendered results page."""

    async def navigate(self, url: str) -> None:
        """Load ``url``; raise :class:`DiscoveryError` when it cannot be reached."""
        ...

    async def wait_for(self, selector: str, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for ``selector``; False on timeout."""
        ...

    async def query_all(self, selector: str) -> List[Any]:
        ...

    async def parent(self, element: Any) -> Optional[Any]:
        ...

    async def click(self, element: Any) -> bool:
        """Click ``element``; False when the click could not be performed."""
        ...

    async def attribute(self, element: Any, name: str) -> Optional[str]:
        ...


class PlaywrightSession:
    """BrowserSession backed by a Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def navigate(self, url: str) -> None:
        try:
            await self._page.goto(url)
        except PlaywrightError as exc:
            raise DiscoveryError(
                DiscoveryError.NAVIGATION, f"Could not load {url}: {exc}"
            ) from exc

    async def wait_for(self, selector: str, timeout: float) -> bool:
        try:
            await self._page.wait_for_selector(selector, timeout=timeout * 1000)
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as exc:
            logger.debug("Waiting for %s failed: %s", selector, exc)
            return False
        return True

    async def query_all(self, selector: str) -> List[ElementHandle]:
        try:
            return await self._page.query_selector_all(selector)
        except PlaywrightError as exc:
            logger.debug("Querying %s failed: %s", selector, exc)
            return []

    async def parent(self, element: ElementHandle) -> Optional[ElementHandle]:
        try:
            handle = await self._page.evaluate_handle(
                "(element) => element.parentElement", element
            )
        except PlaywrightError as exc:
            logger.debug("Parent lookup failed: %s", exc)
            return None
        return handle.as_element()

    async def click(self, element: ElementHandle) -> bool:
        try:
            await element.click()
        except PlaywrightError as exc:
            logger.debug("Click failed: %s", exc)
            return False
        return True

    async def attribute(self, element: ElementHandle, name: str) -> Optional[str]:
        try:
            return await element.get_attribute(name)
        except PlaywrightError as exc:
            logger.debug("Reading %s failed: %s", name, exc)
            return None


@asynccontextmanager
async def open_playwright_session(
    config: SlideshowConfig,
) -> AsyncIterator[PlaywrightSession]:
    """Launch Chromium, open a page and close the browser on exit.

    Playwright errors escaping the session body are reported as
    :class:`DiscoveryError` so callers only handle one fatal error type.
    """
    try:
        playwright = await async_playwright().start()
    except PlaywrightError as exc:
        raise DiscoveryError(
            DiscoveryError.LAUNCH, f"Could not start Playwright: {exc}"
        ) from exc
    try:
        try:
            browser = await playwright.chromium.launch(headless=config.headless)
            page = await browser.new_page()
        except PlaywrightError as exc:
            raise DiscoveryError(
                DiscoveryError.LAUNCH, f"Could not launch Chromium: {exc}"
            ) from exc
        try:
            page.set_default_navigation_timeout(config.navigation_timeout * 1000)
            yield PlaywrightSession(page)
        except PlaywrightError as exc:
            raise DiscoveryError(
                DiscoveryError.NAVIGATION, f"Browser session failed: {exc}"
            ) from exc
        finally:
            await _close_quietly(browser.close, "browser")
    finally:
        await _close_quietly(playwright.stop, "Playwright")


async def _close_quietly(close, what: str) -> None:
    try:
        await close()
    except PlaywrightError as exc:
        logger.debug("Closing %s failed: %s", what, exc)
