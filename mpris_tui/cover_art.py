"""Cover art resolution.

A track's art reference is turned into something the cover widget can draw,
trying the richest option first:

* pixel art: the terminal passed the capability probe and the reference is a
  local file, so the image is decoded with Pillow and drawn as half-blocks;
* banner: a static note saying whether image display is supported here;
* ASCII: a fixed text block, used when pixel machinery is switched off.

Only the most recent reference is remembered. Resolving it again returns the
same view without touching the probe or the decoder.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import unquote

from PIL import Image

from .errors import CoverArtError

log = logging.getLogger(__name__)

FILE_SCHEME = "file://"

# used when strict percent-decoding rejects the path
LITERAL_ESCAPES = (
    ("%20", " "),
    ("%2F", "/"),
    ("%5C", "\\"),
    ("%3A", ":"),
)

NO_COVER_TEXT = "🎵\n\nNo Cover\nAvailable\n\n🎵"
FAILED_TEXT = "🎵\n\nFailed to Load\nCover Image\n\n🎵"
PROBING_TEXT = "🎵\n\nInitializing\nImage Picker...\n\n🎵"
BANNER_SUPPORTED = "🖼\n\nImage display supported\n(cover is not a local file)"
BANNER_UNSUPPORTED = "🖼\n\nImage display not supported\nby this terminal"

ASCII_ART = r"""
   .-----------.
  /  .-------.  \
 |  /    _    \  |
 | |    (_)    | |
 |  \         /  |
  \  '-------'  /
   '-----------'
""".strip("\n")

PIXEL_TERMS = ("xterm-kitty", "wezterm", "foot", "alacritty", "konsole")
BASIC_TERMS = ("dumb", "linux", "vt100", "vt102", "vt220", "ansi", "cons25")


class CoverKind(Enum):
    IMAGE = "image"
    FAILED = "failed"
    BANNER = "banner"
    ASCII = "ascii"
    EMPTY = "empty"


@dataclass(frozen=True)
class CoverView:
    kind: CoverKind
    text: str = ""
    image: Any = field(default=None, compare=False, repr=False)
    reference: Optional[str] = None


EMPTY_VIEW = CoverView(CoverKind.EMPTY, NO_COVER_TEXT)


# ── Reference decoding ───────────────────────────────────────────────


def local_path(reference: Optional[str]) -> Optional[str]:
    """Filesystem path for a file:// reference, None for anything else."""
    if not reference or not reference.startswith(FILE_SCHEME):
        return None
    raw = reference[len(FILE_SCHEME):]
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        decoded = raw
        for escape, char in LITERAL_ESCAPES:
            decoded = decoded.replace(escape, char)
        return decoded


# ── Capability probe ─────────────────────────────────────────────────


def probe_pixel_support(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether the terminal can show half-block pixel art.

    Raises CoverArtError when there is no terminal description to go on.
    """
    env = os.environ if environ is None else environ
    colorterm = env.get("COLORTERM", "").lower()
    if colorterm in ("truecolor", "24bit"):
        return True
    term = env.get("TERM", "").lower()
    if not term:
        raise CoverArtError("TERM is not set")
    if term in BASIC_TERMS or term.startswith("vt"):
        return False
    return "256color" in term or "direct" in term or term in PIXEL_TERMS


def decode_image(path: str):
    with Image.open(path) as img:
        log.info("Detected image format: %s for file: %s", img.format, path)
        return img.convert("RGB")


def ascii_cover(reference: str) -> str:
    name = os.path.basename(local_path(reference) or reference.rstrip("/")) or reference
    return f"{ASCII_ART}\n\n{name[:24]}"


# ── Resolver ─────────────────────────────────────────────────────────


class CoverArtResolver:
    def __init__(
        self,
        probe: Callable[[], bool] = probe_pixel_support,
        decoder: Callable[[str], Any] = decode_image,
        pixel_art: bool = True,
    ):
        self._probe_fn = probe
        self._decoder = decoder
        self.pixel_art = pixel_art
        self._probed = False
        self._pixel_supported = False
        self._reference: Optional[str] = None
        self._view: Optional[CoverView] = None
        self._ascii_cache: Dict[str, str] = {}
        self.probe_count = 0
        self.decode_count = 0

    @property
    def probed(self) -> bool:
        return self._probed

    @property
    def pixel_supported(self) -> bool:
        return self._pixel_supported

    @property
    def current(self) -> Optional[CoverView]:
        return self._view

    def resolve(self, reference: Optional[str]) -> CoverView:
        if self._view is not None and reference == self._reference:
            return self._view

        self._reference = reference
        self._view = None

        if reference is None:
            log.info("No cover URL available, clearing image")
            self._view = EMPTY_VIEW
        else:
            log.info("Cover URL changed to: %s", reference)
            self._view = self._resolve_pixel(reference) if self.pixel_art else self._ascii(reference)
        return self._view

    def _ascii(self, reference: str) -> CoverView:
        text = self._ascii_cache.get(reference)
        if text is None:
            text = ascii_cover(reference)
            self._ascii_cache[reference] = text
        return CoverView(CoverKind.ASCII, text, reference=reference)

    def _ensure_probe(self) -> bool:
        if not self._probed:
            self._probed = True
            self.probe_count += 1
            try:
                self._pixel_supported = bool(self._probe_fn())
                log.info("Terminal pixel art support: %s", self._pixel_supported)
            except CoverArtError as e:
                log.error("Failed to initialize image picker: %s", e)
                self._pixel_supported = False
        return self._pixel_supported

    def _resolve_pixel(self, reference: str) -> CoverView:
        supported = self._ensure_probe()
        path = local_path(reference)
        if not supported or path is None:
            if path is None:
                log.info("Cover URL is not a file:// URL, skipping image loading")
            text = BANNER_SUPPORTED if supported else BANNER_UNSUPPORTED
            return CoverView(CoverKind.BANNER, text, reference=reference)

        log.info("Attempting to load image from: %s", path)
        self.decode_count += 1
        try:
            image = self._decoder(path)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            log.error("Failed to decode image: %s, error: %s", path, e)
            return CoverView(CoverKind.FAILED, FAILED_TEXT, reference=reference)
        log.info("Successfully loaded cover image: %s", path)
        return CoverView(CoverKind.IMAGE, image=image, reference=reference)
