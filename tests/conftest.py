import itertools

import pytest
from dbus_next import Message, Variant

from mpris_ctrl.lib import config
from mpris_ctrl.mpris import MPRIS_PREFIX, PlaybackStatus


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Every test starts with an empty config and its own config/cache dirs."""
    monkeypatch.delenv("MPRIS_CTRL_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_config", None)


class FakePlayer:
    """In-memory stand-in for ``mpris.Player``.

    A command's effect becomes visible only after ``lag`` further status
    reads, like a real player answering the call before acting on it.
    """

    def __init__(self, name, status=PlaybackStatus.PLAYING, title="", lag=0, broken=False):
        self.name = name
        self.status = status
        self.title = title
        self.lag = lag
        self.broken = broken
        self.calls = []
        self.status_reads = 0
        self._pending = None
        self._countdown = 0

    def __repr__(self):
        return f"FakePlayer({self.name!r})"

    def _command(self, name, new_status=None):
        self.calls.append(name)
        if new_status is not None:
            self._pending = new_status
            self._countdown = self.lag

    async def playback_status(self):
        self.status_reads += 1
        if self.broken:
            return None
        if self._pending is not None:
            if self._countdown <= 0:
                self.status, self._pending = self._pending, None
            else:
                self._countdown -= 1
        return self.status

    async def metadata(self):
        if self.broken:
            return {}
        return {"xesam:title": self.title} if self.title else {}

    async def play_pause(self):
        toggled = (PlaybackStatus.PAUSED if self.status == PlaybackStatus.PLAYING
                   else PlaybackStatus.PLAYING)
        self._command("play_pause", toggled)

    async def stop(self):
        self._command("stop", PlaybackStatus.STOPPED)

    async def next(self):
        self._command("next")

    async def previous(self):
        self._command("previous")


class FakeDirectory:
    """Async callable returning the non-stopped players, like ``active_players``."""

    def __init__(self, players):
        self.players = players
        self.queries = 0

    async def __call__(self):
        self.queries += 1
        active = []
        for player in self.players:
            if await player.playback_status() != PlaybackStatus.STOPPED:
                active.append(player)
        return active


class FakeStore:
    def __init__(self, value=0):
        self.value = value
        self.writes = []

    def load(self):
        return self.value

    def store(self, i):
        self.value = i
        self.writes.append(i)
        return i


class FakeBus:
    """Answers the handful of D-Bus calls mpris.py makes.

    ``players`` maps a short player name to its properties, keyed by
    (interface, property) and holding ``Variant`` values.
    """

    def __init__(self, players=None, extra_names=(), list_error=None):
        self.players = {MPRIS_PREFIX + k: v for k, v in (players or {}).items()}
        self.extra_names = list(extra_names)
        self.list_error = list_error
        self.failing = set()
        self.sent = []
        self.disconnected = False
        self._serial = itertools.count(1)

    async def call(self, msg):
        msg.serial = next(self._serial)
        self.sent.append(msg)

        if msg.destination == "org.freedesktop.DBus":
            if self.list_error:
                return Message.new_error(msg, self.list_error, "listing refused")
            names = self.extra_names + list(self.players)
            return Message.new_method_return(msg, "as", [names])

        if msg.destination not in self.players or msg.destination in self.failing:
            return Message.new_error(msg, "org.freedesktop.DBus.Error.ServiceUnknown",
                                     f"{msg.destination} is not running")

        if msg.member == "Get":
            props = self.players[msg.destination]
            key = tuple(msg.body)
            if key not in props:
                return Message.new_error(msg, "org.freedesktop.DBus.Error.InvalidArgs",
                                         f"no property {key[1]}")
            return Message.new_method_return(msg, "v", [props[key]])

        return Message.new_method_return(msg)

    def disconnect(self):
        self.disconnected = True

    def methods_called(self, short_name):
        dest = MPRIS_PREFIX + short_name
        return [m.member for m in self.sent if m.destination == dest and m.member != "Get"]


def player_props(status="Playing", title=None, identity="Fake", loop="None"):
    player = "org.mpris.MediaPlayer2.Player"
    props = {
        ("org.mpris.MediaPlayer2", "Identity"): Variant("s", identity),
        (player, "PlaybackStatus"): Variant("s", status),
        (player, "LoopStatus"): Variant("s", loop),
        (player, "Rate"): Variant("d", 1.0),
        (player, "Shuffle"): Variant("b", False),
        (player, "Volume"): Variant("d", 0.5),
        (player, "Position"): Variant("x", 42_000_000),
    }
    metadata = {"mpris:trackid": Variant("o", "/org/mpris/MediaPlayer2/Track/1")}
    if title is not None:
        metadata["xesam:title"] = Variant("s", title)
    props[(player, "Metadata")] = Variant("a{sv}", metadata)
    return props
