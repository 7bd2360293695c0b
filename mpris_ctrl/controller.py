# mpris-ctrl
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Player selection and state convergence.

Given the active players, the stored index and a command, the ``Controller``
picks the current player, sends the command, waits (bounded) for the player
to report the new state, and describes the result as a ``DisplayState``.

Commands:
    play-pause   toggle, wait for the status to change
    stop         stop, wait, then re-resolve against the new player list
    next-player  move the stored index forward and persist it
    prev-player  move the stored index back and persist it
    next         skip track forward, no wait
    previous     skip track backward, no wait
    anything else: display only
"""

import logging
from dataclasses import dataclass

from .lib.polling import DEFAULT_ATTEMPTS, DEFAULT_INTERVAL, wait_until
from .mpris import TITLE_KEY, PlaybackStatus

log = logging.getLogger(__name__)

PLAY_PAUSE = "play-pause"
STOP = "stop"
NEXT_PLAYER = "next-player"
PREV_PLAYER = "prev-player"
NEXT = "next"
PREVIOUS = "previous"

CYCLE_STEPS = {NEXT_PLAYER: 1, PREV_PLAYER: -1}

TITLE_MAX = 40
ELLIPSIS = "…"


def normalize(i: int, n: int) -> int:
    """Floored modulo: map any integer *i* into ``[0, n)``, wrapping negatives."""
    return ((i % n) + n) % n


def truncate(text: str, max_len: int = TITLE_MAX, ellipsis: str = ELLIPSIS) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + ellipsis


@dataclass
class DisplayState:
    """What the status line shows for the selected player."""

    status: PlaybackStatus | None
    position: int  # 1-based
    total: int
    title: str = ""
    title_max: int = TITLE_MAX

    def render(self) -> str:
        parts = [self.status.value.lower() if self.status else "unknown"]
        if self.total > 1:
            parts.append(f"{self.position}/{self.total}")
        if self.title.strip():
            parts.append(f"‘{truncate(self.title, self.title_max)}’")
        return " ".join(parts)

    def __str__(self):
        return self.render()


class Controller:
    """Runs one command against the current player.

    ``list_players`` is an async callable returning a fresh list of active
    players; it is used to re-resolve the selection after ``stop``.
    ``store`` persists the index for cycle commands (an ``IndexStore``).
    """

    def __init__(self, list_players, store, poll_interval: float = DEFAULT_INTERVAL,
                 poll_attempts: int = DEFAULT_ATTEMPTS, title_max: int = TITLE_MAX):
        self.list_players = list_players
        self.store = store
        self.poll_interval = poll_interval
        self.poll_attempts = poll_attempts
        self.title_max = title_max

    async def execute(self, players: list, stored_index: int,
                      command: str) -> DisplayState | None:
        """Apply *command* and return the state to display, or None if nothing to show."""
        if not players:
            log.debug("No active players")
            return None

        idx = normalize(stored_index, len(players))
        step = CYCLE_STEPS.get(command)
        if step is not None:
            idx = self.store.store(normalize(idx + step, len(players)))
            log.info("Selected player %d/%d", idx + 1, len(players))

        player = players[idx]

        if command == PLAY_PAUSE:
            before = await player.playback_status()
            await player.play_pause()
            await self._wait(lambda: self._status_differs(player, before))

        elif command == STOP:
            before = await player.playback_status()
            await player.stop()
            await self._wait(lambda: self._stopped_or_changed(player, before))

            # A stopped player drops out of the active list.
            players = await self.list_players()
            if not players:
                return None
            idx = normalize(idx, len(players))
            player = players[idx]

        elif command == NEXT:
            await player.next()

        elif command == PREVIOUS:
            await player.previous()

        elif step is None and command:
            log.debug("Unknown command %r, display only", command)

        return await self._describe(player, idx, len(players))

    async def _wait(self, predicate) -> bool:
        return await wait_until(predicate, self.poll_interval, self.poll_attempts)

    @staticmethod
    async def _status_differs(player, before) -> bool:
        return await player.playback_status() != before

    @staticmethod
    async def _stopped_or_changed(player, before) -> bool:
        status = await player.playback_status()
        return status != before or status == PlaybackStatus.STOPPED

    async def _describe(self, player, idx: int, total: int) -> DisplayState:
        metadata = await player.metadata()
        return DisplayState(
            status=await player.playback_status(),
            position=idx + 1,
            total=total,
            title=metadata.get(TITLE_KEY, ""),
            title_max=self.title_max,
        )
