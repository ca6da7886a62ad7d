"""Throttled background downloading of catalog images."""

from __future__ import annotations

import io
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import requests
from filetype import guess
from PIL import Image

from .config import SlideshowConfig
from .errors import DownloadFailure
from .models import ImageCatalog

logger = logging.getLogger("ddg_slideshow.download")


@dataclass
class DownloadStats:
    """Outcome counters for a download pass."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0


def fetch_image(
    session: requests.Session,
    url: str,
    timeout: Optional[float] = None,
) -> Image.Image:
    """Fetch ``url`` and decode the response body into an in-memory image."""
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise DownloadFailure(url, str(exc)) from exc

    data = resp.content
    kind = guess(data)
    if not kind or not kind.mime.startswith("image/"):
        raise DownloadFailure(
            url, f"not an image (Content-Type={resp.headers.get('Content-Type', '')})"
        )
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DownloadFailure(url, f"decode failed: {exc}") from exc
    return image


class DownloadWorker:
    """Walk a catalog once, attaching decoded images to its entries.

    Fetches are strictly serial and every attempt, successful or not, is
    followed by ``config.download_interval`` seconds of idle time. The worker
    is started once with :meth:`start`; the handle can be joined, cancelled
    and queried for completion.
    """

    def __init__(
        self,
        catalog: ImageCatalog,
        config: SlideshowConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config
        self._session = session or requests.Session()
        self._thread: Optional[threading.Thread] = None
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self.stats = DownloadStats()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Download worker has already been started")
        self._thread = threading.Thread(
            target=self.run, name="ddg-slideshow-download", daemon=True
        )
        self._thread.start()

    def cancel(self) -> None:
        """Stop after the fetch in progress; pending entries stay absent."""
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the pass to finish; returns whether it did."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.done

    def run(self) -> None:
        """Download every entry in catalog order."""
        try:
            if len(self.catalog) == 0:
                return
            start = time.perf_counter()
            for index, entry in enumerate(self.catalog):
                if self.cancelled:
                    logger.debug("Download cancelled before entry %d", index)
                    break
                self.stats.attempted += 1
                try:
                    image = fetch_image(
                        self._session, entry.url, self.config.request_timeout
                    )
                except DownloadFailure as exc:
                    self.stats.failed += 1
                    logger.warning("Skipping image %s", exc)
                except Exception:  # pylint: disable=broad-except
                    self.stats.failed += 1
                    logger.exception("Unexpected error downloading %s", entry.url)
                else:
                    entry.attach(image)
                    self.stats.succeeded += 1
                    logger.debug("Downloaded %s (%dx%d)", entry.url, *image.size)
                self._pause(self.config.download_interval)
            logger.info(
                "Downloaded %d/%d images in %.2fs",
                self.stats.succeeded,
                len(self.catalog),
                time.perf_counter() - start,
            )
        finally:
            self._finished.set()

    def _pause(self, seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while not self.cancelled:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self._cancelled.wait(remaining)
