"""The dashboard's single piece of mutable state."""

import logging
from typing import Optional

from .cover_art import CoverArtResolver, CoverView
from .event_loop import KeyPress, PointerPress
from .hit_test import HitTestDispatcher
from .models import Control
from .synchronizer import Synchronizer

log = logging.getLogger(__name__)

LEFT_BUTTON = 1


class Dashboard:
    """Owns the synchronizer, cover resolver, hit-test map and the quit flag."""

    def __init__(self, synchronizer: Synchronizer, resolver: CoverArtResolver):
        self.synchronizer = synchronizer
        self.resolver = resolver
        self.should_quit = False
        self.dispatcher = HitTestDispatcher({
            Control.PREVIOUS: synchronizer.previous,
            Control.PLAY_PAUSE: synchronizer.toggle_play_pause,
            Control.NEXT: synchronizer.next,
            Control.QUIT: self.quit,
        })
        self._keys = {
            "q": self.quit,
            " ": synchronizer.toggle_play_pause,
            "n": synchronizer.next,
            "p": synchronizer.previous,
        }

    def quit(self) -> None:
        self.should_quit = True

    def cover(self) -> CoverView:
        return self.resolver.resolve(self.synchronizer.current_track.art_reference)

    def on_key(self, key: str) -> None:
        command = self._keys.get(key)
        if command is not None:
            command()

    def on_click(self, x: int, y: int, button: int = LEFT_BUTTON) -> Optional[Control]:
        if button != LEFT_BUTTON:
            return None
        return self.dispatcher.click(x, y)

    def on_tick(self, now: float) -> None:
        self.synchronizer.update(now)

    def handle(self, event) -> None:
        if isinstance(event, KeyPress):
            self.on_key(event.key)
        elif isinstance(event, PointerPress):
            self.on_click(event.x, event.y, event.button)
