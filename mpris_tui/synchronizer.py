"""Keeps one TrackInfo snapshot in step with whichever player is current."""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .config import POLL_INTERVAL
from .errors import PlayerSourceError
from .models import PlayerHandle, TrackInfo, micros_to_seconds

log = logging.getLogger(__name__)

STATUS_PLAYING = "Playing"


@dataclass
class SynchronizerState:
    current_player: Optional[PlayerHandle] = None
    current_track: TrackInfo = field(default_factory=TrackInfo)
    last_poll: Optional[float] = None


def _text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def _first_artist(value) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        return _text(value[0]) if value else None
    return _text(value)


def track_from_properties(status: str, metadata: Mapping[str, object], position: int) -> TrackInfo:
    """Build a snapshot from raw MPRIS property values (times in microseconds)."""
    return TrackInfo(
        title=_text(metadata.get("xesam:title")),
        artist=_first_artist(metadata.get("xesam:artist")),
        album=_text(metadata.get("xesam:album")),
        position_seconds=micros_to_seconds(position),
        duration_seconds=micros_to_seconds(metadata.get("mpris:length")),
        is_playing=status == STATUS_PLAYING,
        art_reference=_text(metadata.get("mpris:artUrl")),
    )


class Synchronizer:
    """Rate-limited poller over a PlayerSource."""

    def __init__(self, source, poll_interval: float = POLL_INTERVAL):
        self._source = source
        self._poll_interval = poll_interval
        self._available: List[str] = []
        self.state = SynchronizerState()

    @property
    def current_track(self) -> TrackInfo:
        return self.state.current_track

    @property
    def current_player(self) -> Optional[PlayerHandle]:
        return self.state.current_player

    def is_connected(self) -> bool:
        return self.state.current_player is not None

    def available_players(self) -> List[str]:
        return list(self._available)

    def update(self, now: float) -> bool:
        """Reconcile with the source at most once per poll interval.

        Returns True when a reconciliation pass ran.
        """
        last = self.state.last_poll
        if last is not None and now - last < self._poll_interval:
            return False
        try:
            self._reconcile()
        finally:
            self.state.last_poll = now
        return True

    def _reconcile(self) -> None:
        try:
            players = self._source.enumerate()
        except PlayerSourceError as e:
            log.error("Failed to enumerate players: %s", e)
            players = []

        self._available = [p.name for p in players]

        if not players:
            if self.state.current_player is not None:
                log.info("No players left, disconnected from %s", self.state.current_player.name)
            self.state.current_player = None
            self.state.current_track = TrackInfo()
            return

        current = self.state.current_player
        if current is None or current not in players:
            self.state.current_player = players[0]
            log.info("Switched to player %s", players[0].name)
        else:
            # keep the selection but refresh the handle from this enumeration
            self.state.current_player = players[players.index(current)]

        player = self.state.current_player
        try:
            status = self._source.status(player)
            metadata = self._source.metadata(player)
            position = self._source.position(player)
        except PlayerSourceError as e:
            log.error("Failed to query %s: %s", player.name, e)
            return

        self.state.current_track = track_from_properties(status, metadata, position)

    # ── Commands ──────────────────────────────────────────────────────

    def toggle_play_pause(self) -> None:
        self._send("play_pause", "PlayPause")

    def next(self) -> None:
        self._send("next", "Next")

    def previous(self) -> None:
        self._send("previous", "Previous")

    def _send(self, attr: str, label: str) -> None:
        player = self.state.current_player
        if player is None:
            return
        try:
            getattr(self._source, attr)(player)
        except PlayerSourceError as e:
            log.error("Failed to send %s command: %s", label, e)
            return
        log.info("Sent %s command to %s", label, player.name)
