"""Session-bus access to MPRIS media players through pydbus."""

import logging
from typing import Dict, List, Protocol

from .errors import PlayerSourceError
from .models import PlayerHandle

log = logging.getLogger(__name__)

MPRIS_PREFIX = "org.mpris.MediaPlayer2."
MPRIS_PATH = "/org/mpris/MediaPlayer2"


class PlayerSource(Protocol):
    """What the synchronizer needs from a player backend."""

    def enumerate(self) -> List[PlayerHandle]: ...

    def status(self, handle: PlayerHandle) -> str: ...

    def metadata(self, handle: PlayerHandle) -> Dict[str, object]: ...

    def position(self, handle: PlayerHandle) -> int: ...

    def play_pause(self, handle: PlayerHandle) -> None: ...

    def next(self, handle: PlayerHandle) -> None: ...

    def previous(self, handle: PlayerHandle) -> None: ...


class MprisSource:
    """PlayerSource over the desktop session bus."""

    def __init__(self, bus=None):
        self._bus = bus

    @property
    def bus(self):
        if self._bus is None:
            # pulls in the system GObject bindings
            from pydbus import SessionBus

            try:
                self._bus = SessionBus()
            except Exception as e:
                raise PlayerSourceError(f"cannot connect to session bus: {e}") from e
        return self._bus

    def enumerate(self) -> List[PlayerHandle]:
        try:
            names = self.bus.get(".DBus").ListNames()
        except PlayerSourceError:
            raise
        except Exception as e:
            raise PlayerSourceError(f"ListNames failed: {e}") from e

        handles = []
        for bus_name in names:
            if not bus_name.startswith(MPRIS_PREFIX):
                continue
            try:
                proxy = self.bus.get(bus_name, MPRIS_PATH)
            except Exception as e:
                log.warning("Skipping %s: %s", bus_name, e)
                continue
            handles.append(PlayerHandle(name=_identity(proxy, bus_name), bus_name=bus_name, proxy=proxy))
        return handles

    def status(self, handle: PlayerHandle) -> str:
        return self._read(handle, "PlaybackStatus", lambda v: str(v or ""))

    def metadata(self, handle: PlayerHandle) -> Dict[str, object]:
        return self._read(handle, "Metadata", lambda v: dict(v or {}))

    def position(self, handle: PlayerHandle) -> int:
        return self._read(handle, "Position", lambda v: int(v or 0))

    def play_pause(self, handle: PlayerHandle) -> None:
        self._call(handle, "PlayPause")

    def next(self, handle: PlayerHandle) -> None:
        self._call(handle, "Next")

    def previous(self, handle: PlayerHandle) -> None:
        self._call(handle, "Previous")

    def _read(self, handle: PlayerHandle, prop: str, convert):
        try:
            return convert(getattr(handle.proxy, prop))
        except Exception as e:
            raise PlayerSourceError(f"{handle.name}: reading {prop} failed: {e}") from e

    def _call(self, handle: PlayerHandle, method: str) -> None:
        try:
            getattr(handle.proxy, method)()
        except Exception as e:
            raise PlayerSourceError(f"{handle.name}: {method} failed: {e}") from e


def _identity(proxy, bus_name: str) -> str:
    try:
        identity = proxy.Identity
    except Exception:
        identity = ""
    if identity:
        return str(identity)
    return bus_name[len(MPRIS_PREFIX):].split(".")[0].capitalize()
