"""Data models shared by discovery, downloading and display.

The catalog is handed from one writer to the next: the gallery extractor
owns ``add`` until discovery returns and the catalog is sealed, after which
the download worker is the only writer and may only ``attach`` decoded
images to existing entries. The renderer reads.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from PIL import Image

PROTOCOL_RELATIVE_PREFIX = "//"


def normalize_image_url(src: str) -> str:
    """Turn a protocol-relative address into an explicit https URL."""
    if src.startswith(PROTOCOL_RELATIVE_PREFIX):
        return "https:" + src
    return src


class ImageEntry:
    """A discovered image and, once downloaded, its decoded bitmap."""

    __slots__ = ("_url", "_image")

    def __init__(self, url: str) -> None:
        self._url = url
        self._image: Optional[Image.Image] = None

    def __repr__(self) -> str:
        return f"ImageEntry(url={self._url!r}, ready={self.ready})"

    @property
    def url(self) -> str:
        return self._url

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    @property
    def ready(self) -> bool:
        return self._image is not None

    def attach(self, image: Image.Image) -> None:
        """Store the decoded image. An entry is decoded at most once."""
        if self._image is not None:
            raise ValueError(f"Image already attached for {self._url}")
        self._image = image


class ImageCatalog:
    """Insertion-ordered, deduplicated collection of image entries."""

    def __init__(self) -> None:
        self._entries: List[ImageEntry] = []
        self._seen: set[str] = set()
        self._sealed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> ImageEntry:
        return self._entries[index]

    def __iter__(self) -> Iterator[ImageEntry]:
        return iter(self._entries)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """End the discovery phase; no further entries may be added."""
        self._sealed = True

    def add(self, src: str) -> bool:
        """Insert ``src`` unless an identical URL is already present."""
        if self._sealed:
            raise RuntimeError("Catalog is sealed; discovery has already finished")
        url = normalize_image_url(src)
        if url in self._seen:
            return False
        self._seen.add(url)
        self._entries.append(ImageEntry(url))
        return True

    def urls(self) -> List[str]:
        return [entry.url for entry in self._entries]

    def ready_indices(self) -> List[int]:
        return [idx for idx, entry in enumerate(self._entries) if entry.ready]

    def ready_count(self) -> int:
        return sum(1 for entry in self._entries if entry.ready)
