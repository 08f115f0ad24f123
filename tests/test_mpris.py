import logging

import pytest

from mpris_tui.errors import PlayerSourceError
from mpris_tui.mpris import MPRIS_PATH, MprisSource
from mpris_tui.synchronizer import Synchronizer


class FakeProxy:
    def __init__(self, identity="", status="Playing", metadata=None, position=0, broken=()):
        self._values = {
            "Identity": identity,
            "PlaybackStatus": status,
            "Metadata": metadata,
            "Position": position,
        }
        self._broken = set(broken)
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._broken:
            raise RuntimeError(f"GDBus.Error: {name} unavailable")
        if name in self._values:
            return self._values[name]
        return lambda: self.calls.append(name)


class FakeDBus:
    def __init__(self, names, fail=False):
        self.names = names
        self.fail = fail

    def ListNames(self):
        if self.fail:
            raise RuntimeError("GDBus.Error: no bus")
        return list(self.names)


class FakeBus:
    def __init__(self, proxies, extra_names=(), fail_list=False, unreachable=()):
        self.proxies = proxies
        self.dbus = FakeDBus(list(extra_names) + list(proxies) + list(unreachable), fail_list)
        self.unreachable = set(unreachable)
        self.paths = []

    def get(self, name, path=None):
        if name == ".DBus":
            return self.dbus
        self.paths.append(path)
        if name in self.unreachable:
            raise RuntimeError("GDBus.Error: ServiceUnknown")
        return self.proxies[name]


def test_only_mpris_names_are_enumerated_in_bus_order():
    bus = FakeBus(
        {
            "org.mpris.MediaPlayer2.vlc": FakeProxy("VLC media player"),
            "org.mpris.MediaPlayer2.spotify": FakeProxy("Spotify"),
        },
        extra_names=["org.freedesktop.Notifications", ":1.42"],
    )
    handles = MprisSource(bus).enumerate()
    assert [h.name for h in handles] == ["VLC media player", "Spotify"]
    assert [h.bus_name for h in handles] == ["org.mpris.MediaPlayer2.vlc", "org.mpris.MediaPlayer2.spotify"]
    assert set(bus.paths) == {MPRIS_PATH}


def test_identity_falls_back_to_bus_name_suffix():
    bus = FakeBus({
        "org.mpris.MediaPlayer2.mpv.instance123": FakeProxy(""),
        "org.mpris.MediaPlayer2.firefox": FakeProxy(broken=["Identity"]),
    })
    assert [h.name for h in MprisSource(bus).enumerate()] == ["Mpv", "Firefox"]


def test_unreachable_player_is_skipped_with_warning(caplog):
    bus = FakeBus(
        {"org.mpris.MediaPlayer2.spotify": FakeProxy("Spotify")},
        unreachable=["org.mpris.MediaPlayer2.ghost"],
    )
    with caplog.at_level(logging.WARNING):
        handles = MprisSource(bus).enumerate()
    assert [h.name for h in handles] == ["Spotify"]
    assert "Skipping org.mpris.MediaPlayer2.ghost" in caplog.text


def test_list_names_failure_becomes_player_source_error():
    source = MprisSource(FakeBus({}, fail_list=True))
    with pytest.raises(PlayerSourceError) as exc:
        source.enumerate()
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_properties_are_read_and_coerced():
    proxy = FakeProxy("VLC", status="Paused", metadata={"xesam:title": "Song"}, position=65_000_000)
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    assert source.status(handle) == "Paused"
    assert source.metadata(handle) == {"xesam:title": "Song"}
    assert source.position(handle) == 65_000_000


def test_missing_replies_coerce_to_empty():
    proxy = FakeProxy("VLC", metadata=None, position=None)
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    assert source.metadata(handle) == {}
    assert source.position(handle) == 0


@pytest.mark.parametrize("prop,method", [
    ("PlaybackStatus", "status"),
    ("Metadata", "metadata"),
    ("Position", "position"),
])
def test_failed_reads_become_player_source_error(prop, method):
    proxy = FakeProxy("VLC", broken=[prop])
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    with pytest.raises(PlayerSourceError):
        getattr(source, method)(handle)


def test_malformed_replies_become_player_source_error():
    proxy = FakeProxy("VLC", metadata=42, position="soon")
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    with pytest.raises(PlayerSourceError):
        source.metadata(handle)
    with pytest.raises(PlayerSourceError):
        source.position(handle)


def test_malformed_reply_keeps_stale_track():
    proxy = FakeProxy("VLC", status="Playing", metadata={"xesam:title": "Song"}, position=1_000_000)
    sync = Synchronizer(MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy})))
    sync.update(0.0)
    before = sync.current_track

    proxy._values["Position"] = "garbage"
    sync.update(2.0)

    assert sync.current_track is before
    assert sync.is_connected()


def test_commands_call_player_methods():
    proxy = FakeProxy("VLC")
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    source.play_pause(handle)
    source.next(handle)
    source.previous(handle)
    assert proxy.calls == ["PlayPause", "Next", "Previous"]


def test_failed_command_becomes_player_source_error():
    proxy = FakeProxy("VLC", broken=["Next"])
    source = MprisSource(FakeBus({"org.mpris.MediaPlayer2.vlc": proxy}))
    (handle,) = source.enumerate()
    with pytest.raises(PlayerSourceError):
        source.next(handle)
