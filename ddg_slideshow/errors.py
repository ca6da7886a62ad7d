"""Error types surfaced to the user."""

from __future__ import annotations


class SlideshowError(Exception):
    """Base exception for fatal slideshow failures."""


class InvocationError(SlideshowError):
    """Raised when the slideshow is started without search terms."""


class DiscoveryError(SlideshowError):
    """Raised when the results page cannot be loaded or yields no thumbnails."""

    LAUNCH = "launch"
    NAVIGATION = "navigation"
    NO_RESULTS = "no-results"

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(f"[{reason}] {message}")


class DownloadFailure(Exception):
    """Raised for a single image that could not be fetched or decoded."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"{url}: {message}")
