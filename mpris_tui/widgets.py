from typing import Dict, Optional, Tuple

from PIL import Image
from rich.style import Style
from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static

from .cover_art import PROBING_TEXT, CoverKind, CoverView
from .models import Control, TrackInfo, progress_percent


def image_to_half_blocks(image, width: int, height: int) -> Text:
    """Fit an RGB image into width x height cells, two pixels per cell."""
    if width <= 0 or height <= 0:
        return Text("")
    w, h = image.size
    if not w or not h:
        return Text("")

    # one cell is roughly twice as tall as wide; a half-block halves that
    scale = min(width / w, (height * 2) / h)
    px_w = max(1, int(w * scale))
    px_h = max(2, int(h * scale) // 2 * 2)
    img = image.resize((px_w, px_h), resample=Image.Resampling.LANCZOS)

    out = Text(justify="center")
    pixels = img.load()
    for y in range(0, px_h, 2):
        for x in range(px_w):
            r1, g1, b1 = pixels[x, y][:3]
            r2, g2, b2 = pixels[x, y + 1][:3]
            style = Style(color=f"#{r1:02x}{g1:02x}{b1:02x}", bgcolor=f"#{r2:02x}{g2:02x}{b2:02x}")
            out.append("▀", style=style)
        if y + 2 < px_h:
            out.append("\n")
    return out


# ── Widgets ──────────────────────────────────────────────────────────


class CoverArt(Static):
    """Draws the resolved cover: pixels as half-blocks, everything else as text."""

    cover: reactive[Optional[CoverView]] = reactive(None)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._blocks: Dict[Tuple[int, int, int], Text] = {}

    def watch_cover(self, old: Optional[CoverView], new: Optional[CoverView]) -> None:
        self._blocks.clear()

    def render(self):
        cover = self.cover
        if cover is None:
            return Text(PROBING_TEXT, justify="center")
        if cover.kind is CoverKind.IMAGE and cover.image is not None:
            key = (id(cover.image), self.size.width, self.size.height)
            blocks = self._blocks.get(key)
            if blocks is None:
                blocks = image_to_half_blocks(cover.image, self.size.width, self.size.height)
                self._blocks[key] = blocks
            return blocks
        return Text(cover.text, justify="center")


class TrackField(Static):
    """One labelled line of track info."""


class TrackProgress(Static):
    """Progress bar for the current track."""

    track: reactive[TrackInfo] = reactive(TrackInfo)

    def render(self) -> str:
        t = self.track
        if t.duration_seconds <= 0:
            return "[dim]─── no track ───[/dim]"
        width = max(10, self.size.width - 6)
        pct = progress_percent(t)
        filled = pct * width // 100
        bar = "[bold green]━[/]" * filled + "[dim]╌[/]" * (width - filled)
        return f"{bar} {pct:3d}%"


class ControlButton(Static):
    """A clickable control; its screen region is registered every frame."""

    def __init__(self, control: Control, label: str, **kwargs) -> None:
        super().__init__(label, **kwargs)
        self.control = control
