#!/usr/bin/env python3
"""mpris-tui: mirror and control the active desktop media player from a terminal."""

import asyncio
import logging
from typing import Optional

from textual import events, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Static

from . import view
from .config import APP_NAME, Settings, init_logging, load_settings
from .cover_art import CoverArtResolver
from .dashboard import Dashboard
from .event_loop import EventLoop, KeyPress, PointerPress
from .models import ButtonRegion, Control
from .mpris import MprisSource
from .synchronizer import Synchronizer
from .widgets import ControlButton, CoverArt, TrackField, TrackProgress

log = logging.getLogger(__name__)


# ── Main App ─────────────────────────────────────────────────────────


class DashboardApp(App):
    """Shows the current MPRIS player and sends it play/pause/next/previous."""

    CSS = """
    Screen {
        background: $surface;
    }

    #title {
        height: 3;
        content-align: center middle;
        color: $warning;
        border: round $accent;
    }

    #main-layout {
        height: 1fr;
        min-height: 10;
    }

    #cover {
        width: 40%;
        border: round $accent;
        border-title-color: $warning;
        content-align: center middle;
        color: $primary;
    }

    #track-panel {
        width: 60%;
    }

    #status {
        height: auto;
        min-height: 3;
        color: $success;
        border: round $primary-background-darken-1;
    }

    .track-field {
        height: 3;
        border: round $primary-background-darken-1;
    }

    #track-title {
        text-style: bold;
    }

    #track-artist {
        color: $secondary;
    }

    #track-album {
        color: magenta;
    }

    #progress {
        height: 3;
        border: round $primary-background-darken-1;
    }

    #controls {
        height: 5;
    }

    ControlButton {
        width: 1fr;
        height: 5;
        content-align: center middle;
        border: round $primary-background-darken-2;
        background: $primary;
        color: white;
    }

    #btn-play_pause {
        background: $success;
    }

    #btn-quit {
        background: $error;
    }
    """

    TITLE = "🎵 MPRIS TUI"

    def __init__(self, dashboard: Dashboard, settings: Optional[Settings] = None):
        super().__init__()
        self.dashboard = dashboard
        self.settings = settings or Settings()
        self.loop_error: Optional[BaseException] = None
        self._events: asyncio.Queue = asyncio.Queue()

    def compose(self) -> ComposeResult:
        yield Static(self.TITLE, id="title")
        with Horizontal(id="main-layout"):
            yield CoverArt(id="cover")
            with Vertical(id="track-panel"):
                yield Static("", id="status")
                yield TrackField("", id="track-title", classes="track-field")
                yield TrackField("", id="track-artist", classes="track-field")
                yield TrackField("", id="track-album", classes="track-field")
                yield TrackProgress(id="progress")
        with Horizontal(id="controls"):
            yield ControlButton(Control.PREVIOUS, "⏮️ Previous", id="btn-previous")
            yield ControlButton(Control.PLAY_PAUSE, "▶️ Play", id="btn-play_pause")
            yield ControlButton(Control.NEXT, "Next ⏭️", id="btn-next")
            yield ControlButton(Control.QUIT, "❌ Quit", id="btn-quit")

    def on_mount(self) -> None:
        self.query_one("#cover", CoverArt).border_title = "🎨 Cover Art"
        self.query_one("#status", Static).border_title = "🔌 Status"
        self.query_one("#track-title", TrackField).border_title = "🎵 Track"
        self.query_one("#track-artist", TrackField).border_title = "🎤 Artist"
        self.query_one("#track-album", TrackField).border_title = "💿 Album"
        for control, hint in ((Control.PREVIOUS, "P"), (Control.PLAY_PAUSE, "SPACE"),
                              (Control.NEXT, "N"), (Control.QUIT, "Q")):
            self.query_one(f"#btn-{control.value}", ControlButton).border_title = hint
        self.run_loop()

    # ── Loop hosting ──────────────────────────────────────────────────

    @work(exclusive=True, exit_on_error=False)
    async def run_loop(self) -> None:
        loop = EventLoop(
            self.dashboard,
            draw=self.draw_frame,
            next_event=self.next_event,
            tick_rate=self.settings.tick_rate,
        )
        try:
            await loop.run()
        except Exception as e:
            self.loop_error = e
        finally:
            self.exit()

    async def next_event(self, timeout: float):
        try:
            return self._events.get_nowait()
        except asyncio.QueueEmpty:
            pass
        if timeout <= 0:
            # let textual paint before the tick runs
            await asyncio.sleep(0)
            return None
        try:
            return await asyncio.wait_for(self._events.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def draw_frame(self) -> None:
        sync = self.dashboard.synchronizer
        track = sync.current_track
        try:
            self.query_one("#cover", CoverArt).cover = self.dashboard.cover()
            self.query_one("#status", Static).update(
                view.status_text(sync.current_player, track, sync.available_players())
            )
            self.query_one("#track-title", TrackField).update(view.title_text(track))
            self.query_one("#track-artist", TrackField).update(view.artist_text(track))
            self.query_one("#track-album", TrackField).update(view.album_text(track))
            progress = self.query_one("#progress", TrackProgress)
            progress.track = track
            progress.border_title = f"⏱️  Progress ({view.progress_caption(track)})"
            self.query_one("#btn-play_pause", ControlButton).update(view.play_pause_label(track))
        except NoMatches:
            return

        regions = []
        for button in self.query(ControlButton):
            r = button.region
            regions.append(ButtonRegion(button.control, r.x, r.y, r.width, r.height))
        self.dashboard.dispatcher.update_regions(regions)

    # ── Events ────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        key = event.character if event.character else event.key
        self._events.put_nowait(KeyPress(key))
        event.stop()

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._events.put_nowait(PointerPress(event.screen_x, event.screen_y, event.button))


# ── Entry point ──────────────────────────────────────────────────────


def build_dashboard(settings: Settings, source=None) -> Dashboard:
    synchronizer = Synchronizer(source or MprisSource(), poll_interval=settings.poll_interval)
    resolver = CoverArtResolver(pixel_art=not settings.use_ascii)
    return Dashboard(synchronizer, resolver)


def main() -> int:
    settings = load_settings()
    log_path = init_logging(settings)
    log.info("%s started, logging to %s", APP_NAME, log_path)

    app = DashboardApp(build_dashboard(settings), settings)
    try:
        app.run()
    except Exception:
        log.exception("Terminal setup or teardown failed")
        return 1

    if app.loop_error is not None:
        log.error("Application error: %r", app.loop_error)
        return 1
    log.info("%s ended", APP_NAME)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
