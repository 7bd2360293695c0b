"""
mpris-ctrl — command-line controller for MPRIS media players.

One invocation picks the "current" player out of every running, non-stopped
MPRIS player on the session bus, optionally sends it a transport command,
and prints a one-line status.  The only state kept between invocations is
the index of the current player.

  mpris.py       — MPRIS2 player handle and player directory (dbus-next)
  controller.py  — player selection, command dispatch, convergence, display
  cli.py         — entry point: cache dir, index lock, bus connection, output
  lib/           — config, index store, polling, errors
"""

__version__ = "1.0.0"
