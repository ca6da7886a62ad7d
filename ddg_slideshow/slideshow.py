"""Full-screen Tk slideshow reading from the image catalog."""

from __future__ import annotations

import logging
import random
from typing import Any, Optional, Sequence

from PIL import Image, ImageOps

from .config import SlideshowConfig
from .models import ImageCatalog

logger = logging.getLogger("ddg_slideshow.slideshow")

WAITING_TEXT = "Waiting for images…"
EMPTY_TEXT = "No images could be downloaded.\nPress Esc to quit."
DISPLAY_MODES = {"RGB", "RGBA", "L"}


def window_title(search_terms: Sequence[str]) -> str:
    return f"[{', '.join(search_terms)}] DuckDuckGo Slideshow"


def pick_next_index(
    catalog: ImageCatalog,
    rng: random.Random,
    previous: Optional[int] = None,
) -> Optional[int]:
    """Pick a random downloaded entry, or None when nothing is ready yet.

    The entry shown last is not repeated while another one is available.
    """
    ready = catalog.ready_indices()
    if not ready:
        return None
    if len(ready) > 1 and previous in ready:
        ready.remove(previous)
    return rng.choice(ready)


def fit_image(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale ``image`` to fit inside the window, keeping its aspect ratio."""
    if image.mode not in DISPLAY_MODES:
        image = image.convert("RGB")
    if width <= 1 or height <= 1:
        return image
    return ImageOps.contain(image, (width, height))


def notify_error(title: str, message: str) -> None:
    """Show a blocking error dialog, or log the error without a display."""
    logger.error("%s: %s", title, message)
    try:
        import tkinter as tk
        from tkinter import messagebox

        root = tk.Tk()
    except Exception:  # pylint: disable=broad-except
        logger.debug("No display available for the error dialog")
        return
    try:
        root.withdraw()
        messagebox.showerror(title, message, parent=root)
    finally:
        root.destroy()


class SlideRenderer:
    """Show a random downloaded image every ``config.slide_interval`` seconds."""

    def __init__(
        self,
        catalog: ImageCatalog,
        config: SlideshowConfig,
        title: str,
        worker: Any = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config
        self.title = title
        self.worker = worker
        self._rng = rng or random.Random()
        self._current: Optional[int] = None
        self._root: Any = None
        self._label: Any = None

    def fallback_text(self) -> str:
        if self.worker is not None and not self.worker.done:
            return WAITING_TEXT
        return EMPTY_TEXT

    def run(self) -> None:
        """Open the window and block until it is closed."""
        import tkinter as tk

        try:
            root = tk.Tk()
        except tk.TclError as exc:
            logger.error("Cannot open the slideshow window: %s", exc)
            return
        root.title(self.title)
        root.configure(background="black", cursor="none")
        root.attributes("-fullscreen", True)
        root.bind("<Escape>", lambda _event: root.destroy())

        label = tk.Label(
            root,
            background="black",
            foreground="white",
            font=("Helvetica", 24),
        )
        label.pack(expand=True, fill=tk.BOTH)

        self._root = root
        self._label = label
        root.after(0, self._tick)
        root.mainloop()

    def _tick(self) -> None:
        index = pick_next_index(self.catalog, self._rng, self._current)
        if index is None:
            self._label.configure(image="", text=self.fallback_text())
            self._label.image = None
        elif index != self._current:
            self._show(index)
        self._root.after(int(self.config.slide_interval * 1000), self._tick)

    def _show(self, index: int) -> None:
        from PIL import ImageTk

        image = self.catalog[index].image
        self._root.update_idletasks()
        fitted = fit_image(image, self._root.winfo_width(), self._root.winfo_height())
        photo = ImageTk.PhotoImage(fitted)
        self._label.configure(image=photo, text="")
        self._label.image = photo
        self._current = index
        logger.debug("Showing %s", self.catalog[index].url)
