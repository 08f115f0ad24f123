import pytest

from mpris_tui.errors import PlayerSourceError
from mpris_tui.models import PlayerHandle


class FakePlayer:
    def __init__(self, name, status="Paused", metadata=None, position=0):
        self.handle = PlayerHandle(name=name, bus_name=f"org.mpris.MediaPlayer2.{name.lower()}")
        self.status = status
        self.metadata = metadata or {}
        self.position = position
        self.fail_queries = False
        self.fail_commands = False


class FakeSource:
    """In-memory PlayerSource recording every call."""

    def __init__(self, *players):
        self.players = list(players)
        self.fail_enumerate = False
        self.enumerations = 0
        self.commands = []

    def _player(self, handle):
        for p in self.players:
            if p.handle == handle:
                return p
        raise PlayerSourceError(f"{handle.name} is gone")

    def enumerate(self):
        self.enumerations += 1
        if self.fail_enumerate:
            raise PlayerSourceError("bus down")
        return [p.handle for p in self.players]

    def _query(self, handle, attr):
        p = self._player(handle)
        if p.fail_queries:
            raise PlayerSourceError("query failed")
        return getattr(p, attr)

    def status(self, handle):
        return self._query(handle, "status")

    def metadata(self, handle):
        return self._query(handle, "metadata")

    def position(self, handle):
        return self._query(handle, "position")

    def _command(self, handle, name):
        p = self._player(handle)
        if p.fail_commands:
            raise PlayerSourceError(f"{name} failed")
        self.commands.append((handle.name, name))

    def play_pause(self, handle):
        self._command(handle, "play_pause")

    def next(self, handle):
        self._command(handle, "next")

    def previous(self, handle):
        self._command(handle, "previous")


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def paused_player():
    return FakePlayer(
        "Spotify",
        status="Paused",
        metadata={
            "xesam:title": "Song",
            "xesam:artist": ["Artist A", "Artist B"],
            "xesam:album": "Album",
            "mpris:length": 200_000_000,
            "mpris:artUrl": "file:///tmp/cover%20art.png",
        },
        position=65_000_000,
    )
