"""Configuration objects and constants for the slideshow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

SEARCH_URL_TEMPLATE = (
    "https://duckduckgo.com/?t=ffab&q={query}&atb=v348-1"
    "&iax=images&ia=images&pn=6&iaf=size%3AWallpaper"
)

# Markup of the results page; these change whenever the site does.
THUMBNAIL_SELECTOR = "img.tile--img__img"
DETAIL_IMAGE_SELECTOR = "img.detail__media__img-highres"

# Parent hops from a thumbnail <img> to the element that opens the detail view.
WRAPPER_ANCESTOR_DEPTH = 3

DEFAULT_SELECTOR_TIMEOUT = 30.0
DEFAULT_DETAIL_TIMEOUT = 10.0
DEFAULT_DOWNLOAD_INTERVAL = 0.5
DEFAULT_SLIDE_INTERVAL = 2.5


@dataclass
class SlideshowConfig:
    """Top-level settings that control discovery, downloading and display."""

    headless: bool = True
    navigation_timeout: float = 30.0
    selector_timeout: float = DEFAULT_SELECTOR_TIMEOUT
    detail_timeout: float = DEFAULT_DETAIL_TIMEOUT
    download_interval: float = DEFAULT_DOWNLOAD_INTERVAL
    request_timeout: Optional[float] = None
    slide_interval: float = DEFAULT_SLIDE_INTERVAL
