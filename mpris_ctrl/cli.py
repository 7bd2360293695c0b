# mpris-ctrl
# SPDX-License-Identifier: GPL-3.0-or-later

"""
mpris-ctrl — cycle between running MPRIS players and send transport commands.

Prints one status line for the selected player after each action, e.g.

    $ mpris-ctrl play-pause
    paused 2/3 ‘Some Song’

Usage:
    mpris-ctrl [--debug] [COMMAND]

COMMAND is one of play-pause, stop, next-player, prev-player, next, previous.
Anything else (or nothing) just shows the current status.

Invocations serialize on an exclusive lock on the index file, so rapid
key-repeat from a hotkey daemon cannot lose a player-cycle step.
"""

import argparse
import asyncio
import logging
import os
import sys

from dbus_next import BusType
from dbus_next.aio import MessageBus

from .controller import (NEXT, NEXT_PLAYER, PLAY_PAUSE, PREV_PLAYER, PREVIOUS, STOP,
                         TITLE_MAX, Controller)
from .lib.config import PROGRAM_NAME, cfg
from .lib.errors import MprisCtrlError
from .lib.index_store import locked_index
from .lib.polling import DEFAULT_ATTEMPTS, DEFAULT_INTERVAL
from .mpris import active_players

logger = logging.getLogger(PROGRAM_NAME)

INDEX_FILE = "lock"

COMMANDS = (PLAY_PAUSE, STOP, NEXT_PLAYER, PREV_PLAYER, NEXT, PREVIOUS)


def cache_dir() -> str:
    """Return the program cache directory, creating it (mode 0700) if needed."""
    base = cfg("cache_dir") or os.environ.get("XDG_CACHE_HOME")
    if not base:
        home = os.path.expanduser("~")
        if home == "~":
            raise MprisCtrlError("get user cache dir: neither $XDG_CACHE_HOME nor $HOME is defined")
        base = os.path.join(home, ".cache")
    path = os.path.join(base, PROGRAM_NAME)
    try:
        os.makedirs(path, mode=0o700, exist_ok=True)
    except OSError as e:
        raise MprisCtrlError(f"create cache dir: {e}") from e
    return path


async def connect_session_bus():
    try:
        return await MessageBus(bus_type=BusType.SESSION).connect()
    except Exception as e:
        raise MprisCtrlError(f"get session: {e}") from e


async def get_output_from(bus, store, command: str) -> str:
    """Run *command* against the players on *bus*; return the line to print ('' for none)."""

    async def list_active():
        try:
            return await active_players(bus)
        except MprisCtrlError as e:
            raise e.wrap("get players")

    controller = Controller(
        list_active,
        store,
        poll_interval=cfg("poll", "interval", default=DEFAULT_INTERVAL),
        poll_attempts=int(cfg("poll", "attempts", default=DEFAULT_ATTEMPTS)),
        title_max=int(cfg("display", "title_max", default=TITLE_MAX)),
    )
    players = await list_active()
    state = await controller.execute(players, store.load(), command)
    return state.render() if state else ""


async def get_output(command: str) -> str:
    index_path = os.path.join(cache_dir(), INDEX_FILE)
    with locked_index(index_path) as store:
        bus = await connect_session_bus()
        try:
            return await get_output_from(bus, store, command)
        except MprisCtrlError as e:
            raise e.wrap("get output")
        finally:
            bus.disconnect()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Control running MPRIS media players and print their status.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="",
        metavar="COMMAND",
        help="one of: " + ", ".join(COMMANDS) + " (anything else shows status only)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="log debug output to stderr",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool):
    if debug:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(str(cfg("log_level", default="WARNING")).upper())
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)
    logger.debug("Command: %r", args.command)

    try:
        output = asyncio.run(get_output(args.command))
    except MprisCtrlError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if output:
        print(output)
    return 0

