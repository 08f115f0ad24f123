"""Text shown by the widgets, derived from the current snapshot."""

from typing import Optional, Sequence

from .cover_art import FILE_SCHEME
from .models import PlayerHandle, TrackInfo, format_time


def status_text(player: Optional[PlayerHandle], track: TrackInfo, available: Sequence[str] = ()) -> str:
    if player is None:
        return "❌ Not connected to D-Bus"
    line = f"🔗 Connected to: {player.name}"
    if track.art_reference:
        icon = "📁" if track.art_reference.startswith(FILE_SCHEME) else "🌐"
        line += f"\n{icon} Cover: {track.art_reference}"
    others = [name for name in available if name != player.name]
    if others:
        line += f"\n🎧 Also available: {', '.join(others)}"
    return line


def title_text(track: TrackInfo) -> str:
    icon = "▶️" if track.is_playing else "⏸️"
    return f"{icon} {track.title or 'Unknown'}"


def artist_text(track: TrackInfo) -> str:
    return track.artist or "Unknown Artist"


def album_text(track: TrackInfo) -> str:
    return track.album or "Unknown Album"


def progress_caption(track: TrackInfo) -> str:
    return f"{format_time(track.position_seconds)} / {format_time(track.duration_seconds)}"


def play_pause_label(track: TrackInfo) -> str:
    return "⏸️ Pause" if track.is_playing else "▶️ Play"
