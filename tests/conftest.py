"""Shared test fixtures for ddg_slideshow."""

from __future__ import annotations

import io
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

import pytest
import requests
from PIL import Image

from ddg_slideshow.config import (
    DETAIL_IMAGE_SELECTOR,
    THUMBNAIL_SELECTOR,
    SlideshowConfig,
)


class FakeElement:
    """Minimal DOM node: a parent link, attributes and an optional click action."""

    def __init__(
        self,
        name: str,
        parent: Optional["FakeElement"] = None,
        attrs: Optional[Dict[str, str]] = None,
        on_click: Optional[Callable[[], None]] = None,
    ) -> None:
        self.name = name
        self.parent = parent
        self.attrs = attrs or {}
        self.on_click = on_click

    def __repr__(self) -> str:
        return f"FakeElement({self.name!r})"


class FakeGalleryPage:
    """In-memory BrowserSession modelling the results grid and detail view."""

    def __init__(self) -> None:
        self.thumbnails: List[FakeElement] = []
        self.detail_images: List[FakeElement] = []
        self.visited: List[str] = []
        self.clicked: List[FakeElement] = []
        self.waits: List[str] = []

    def add_thumbnail(
        self,
        name: str,
        sources: List[Optional[str]],
        broken_chain: bool = False,
    ) -> FakeElement:
        """Add a thumbnail whose wrapper, once clicked, shows ``sources``."""
        wrapper = FakeElement(f"{name}-wrapper")
        details = [
            FakeElement(f"{name}-detail-{idx}", attrs={} if src is None else {"src": src})
            for idx, src in enumerate(sources)
        ]

        def show() -> None:
            self.detail_images = details

        wrapper.on_click = show
        div = FakeElement(f"{name}-div", parent=None if broken_chain else wrapper)
        span = FakeElement(f"{name}-span", parent=div)
        thumbnail = FakeElement(name, parent=span)
        self.thumbnails.append(thumbnail)
        return thumbnail

    def _select(self, selector: str) -> List[FakeElement]:
        if selector == THUMBNAIL_SELECTOR:
            return list(self.thumbnails)
        if selector == DETAIL_IMAGE_SELECTOR:
            return list(self.detail_images)
        return []

    async def navigate(self, url: str) -> None:
        self.visited.append(url)

    async def wait_for(self, selector: str, timeout: float) -> bool:
        self.waits.append(selector)
        return bool(self._select(selector))

    async def query_all(self, selector: str) -> List[FakeElement]:
        return self._select(selector)

    async def parent(self, element: FakeElement) -> Optional[FakeElement]:
        return element.parent

    async def click(self, element: FakeElement) -> bool:
        self.clicked.append(element)
        if element.on_click is None:
            return False
        element.on_click()
        return True

    async def attribute(self, element: FakeElement, name: str) -> Optional[str]:
        return element.attrs.get(name)


def session_factory_for(page: FakeGalleryPage):
    @asynccontextmanager
    async def factory(config: SlideshowConfig):
        yield page

    return factory


def make_response(url: str, status: int = 200, content: bytes = b"") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = content
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    return resp


class FakeHttpSession:
    """Stand-in for requests.Session returning canned responses by URL."""

    def __init__(self, responses: Dict[str, object]) -> None:
        self.responses = responses
        self.calls: List[str] = []
        self.timeouts: List[Optional[float]] = []

    def get(self, url: str, timeout: Optional[float] = None) -> requests.Response:
        self.calls.append(url)
        self.timeouts.append(timeout)
        outcome = self.responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def png_bytes(size=(8, 6), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def gallery_page() -> FakeGalleryPage:
    return FakeGalleryPage()


@pytest.fixture
def fast_config() -> SlideshowConfig:
    """Config with short waits so throttled tests stay quick."""
    return SlideshowConfig(download_interval=0.05, selector_timeout=0.1, detail_timeout=0.1)


@pytest.fixture
def sample_png() -> bytes:
    return png_bytes()
