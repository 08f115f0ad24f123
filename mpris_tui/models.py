from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

MICROS_PER_SECOND = 1_000_000


# ── Data ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TrackInfo:
    """Snapshot of what the current player reports. Replaced, never edited."""

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    position_seconds: int = 0
    duration_seconds: int = 0
    is_playing: bool = False
    art_reference: Optional[str] = None


@dataclass(frozen=True)
class PlayerHandle:
    """A discovered player. Two handles are the same player when their names match."""

    name: str
    bus_name: str = field(default="", compare=False)
    proxy: Any = field(default=None, compare=False, repr=False)


class Control(Enum):
    PREVIOUS = "previous"
    PLAY_PAUSE = "play_pause"
    NEXT = "next"
    QUIT = "quit"


@dataclass(frozen=True)
class ButtonRegion:
    control: Control
    x: int
    y: int
    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


# ── Helpers ──────────────────────────────────────────────────────────


def micros_to_seconds(value) -> int:
    """Whole seconds, truncated. Missing or negative input counts as zero."""
    if value is None:
        return 0
    try:
        micros = int(value)
    except (TypeError, ValueError):
        return 0
    if micros <= 0:
        return 0
    return micros // MICROS_PER_SECOND


def progress_percent(track: TrackInfo) -> int:
    if track.duration_seconds <= 0:
        return 0
    pct = int(track.position_seconds / track.duration_seconds * 100)
    return max(0, min(100, pct))


def format_time(seconds: int) -> str:
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"
