# mpris-ctrl
# SPDX-License-Identifier: GPL-3.0-or-later

"""
MPRIS2 client over the session D-Bus.

A ``Player`` is a handle on one running media player.  It exposes both the
base interface (org.mpris.MediaPlayer2: identity, raise, quit) and the
player interface (org.mpris.MediaPlayer2.Player: status, metadata, loop,
rate, shuffle, volume, position, transport commands, OpenUri) as one flat
contract.

Transport commands are fire-and-forget: the player acknowledges the call,
not its effect.  Property reads never raise; a player that fails to answer
reads as None / {} so one broken player cannot break the others.

    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    for player in await active_players(bus):
        print(player.name, await player.playback_status())
"""

import enum
import logging

from dbus_next import Message, MessageType, Variant
from dbus_next.errors import DBusError

from .lib.errors import MprisCtrlError

log = logging.getLogger(__name__)

MPRIS_PREFIX = "org.mpris.MediaPlayer2."
MPRIS_PATH = "/org/mpris/MediaPlayer2"
BASE_IFACE = "org.mpris.MediaPlayer2"
PLAYER_IFACE = "org.mpris.MediaPlayer2.Player"
PROPS_IFACE = "org.freedesktop.DBus.Properties"

DBUS_NAME = "org.freedesktop.DBus"
DBUS_PATH = "/org/freedesktop/DBus"

TITLE_KEY = "xesam:title"


class PlaybackStatus(str, enum.Enum):
    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"


class LoopStatus(str, enum.Enum):
    NONE = "None"
    TRACK = "Track"
    PLAYLIST = "Playlist"


def _check_reply(reply: Message) -> Message:
    if reply.message_type == MessageType.ERROR:
        text = reply.body[0] if reply.body else ""
        raise DBusError(reply.error_name, text, reply)
    return reply


def _stringify(value) -> str:
    """Flatten a metadata value to a display string."""
    if isinstance(value, Variant):
        value = value.value
    if isinstance(value, (list, tuple)):
        return ", ".join(_stringify(v) for v in value)
    return str(value)


async def list_players(bus) -> list[str]:
    """Return the bus names of all running MPRIS players, sorted.

    Sorting gives a deterministic order across invocations so a stored
    index keeps pointing at the same player while the set is unchanged.
    """
    try:
        reply = _check_reply(await bus.call(Message(
            destination=DBUS_NAME,
            path=DBUS_PATH,
            interface=DBUS_NAME,
            member="ListNames",
        )))
    except (DBusError, OSError) as e:
        raise MprisCtrlError(f"list players: {e}") from e
    return sorted(name for name in reply.body[0] if name.startswith(MPRIS_PREFIX))


async def active_players(bus) -> list["Player"]:
    """Every running player whose playback status is not Stopped."""
    players = []
    for name in await list_players(bus):
        player = Player(bus, name)
        if await player.playback_status() == PlaybackStatus.STOPPED:
            log.debug("Skipping stopped player %s", name)
            continue
        players.append(player)
    return players


class Player:
    """Handle on one MPRIS player, addressed by its bus name."""

    def __init__(self, bus, name: str):
        self.bus = bus
        self.name = name

    def __repr__(self):
        return f"Player({self.name!r})"

    # ── Remote calls ──

    async def _call(self, interface: str, member: str, signature: str = "", body=()):
        """Invoke a method; failures are logged, not raised."""
        try:
            _check_reply(await self.bus.call(Message(
                destination=self.name,
                path=MPRIS_PATH,
                interface=interface,
                member=member,
                signature=signature,
                body=list(body),
            )))
        except (DBusError, OSError) as e:
            log.warning("%s: %s.%s failed: %s", self.name, interface, member, e)

    async def _get_property(self, interface: str, prop: str):
        """Read a property value, or None if the player cannot answer."""
        try:
            reply = _check_reply(await self.bus.call(Message(
                destination=self.name,
                path=MPRIS_PATH,
                interface=PROPS_IFACE,
                member="Get",
                signature="ss",
                body=[interface, prop],
            )))
        except (DBusError, OSError) as e:
            log.warning("Could not get dbus property %s %s from %s: %s",
                        interface, prop, self.name, e)
            return None
        return reply.body[0].value

    # ── Base interface ──

    async def identity(self) -> str | None:
        value = await self._get_property(BASE_IFACE, "Identity")
        return None if value is None else str(value)

    async def raise_window(self):
        await self._call(BASE_IFACE, "Raise")

    async def quit(self):
        await self._call(BASE_IFACE, "Quit")

    # ── Player interface ──

    async def playback_status(self) -> PlaybackStatus | None:
        """Current status, or None if unreadable or not a known value."""
        value = await self._get_property(PLAYER_IFACE, "PlaybackStatus")
        try:
            return PlaybackStatus(value)
        except ValueError:
            if value is not None:
                log.warning("%s: unknown PlaybackStatus %r", self.name, value)
            return None

    async def metadata(self) -> dict[str, str]:
        value = await self._get_property(PLAYER_IFACE, "Metadata")
        if not isinstance(value, dict):
            return {}
        return {k: _stringify(v) for k, v in value.items()}

    async def loop_status(self) -> LoopStatus | None:
        value = await self._get_property(PLAYER_IFACE, "LoopStatus")
        try:
            return LoopStatus(value)
        except ValueError:
            if value is not None:
                log.warning("%s: unknown LoopStatus %r", self.name, value)
            return None

    async def rate(self) -> float | None:
        return await self._get_number("Rate", float)

    async def volume(self) -> float | None:
        return await self._get_number("Volume", float)

    async def position(self) -> int | None:
        """Playback position in microseconds."""
        return await self._get_number("Position", int)

    async def shuffle(self) -> bool | None:
        value = await self._get_property(PLAYER_IFACE, "Shuffle")
        return value if isinstance(value, bool) else None

    async def _get_number(self, prop: str, kind):
        value = await self._get_property(PLAYER_IFACE, prop)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return kind(value)

    async def open_uri(self, uri: str):
        await self._call(PLAYER_IFACE, "OpenUri", "s", [uri])

    async def play(self):
        await self._call(PLAYER_IFACE, "Play")

    async def pause(self):
        await self._call(PLAYER_IFACE, "Pause")

    async def play_pause(self):
        await self._call(PLAYER_IFACE, "PlayPause")

    async def stop(self):
        await self._call(PLAYER_IFACE, "Stop")

    async def next(self):
        await self._call(PLAYER_IFACE, "Next")

    async def previous(self):
        await self._call(PLAYER_IFACE, "Previous")
