"""Fatal error type for mpris-ctrl.

Anything raised as ``MprisCtrlError`` aborts the invocation: the CLI prints
``error: <message>`` on stderr and exits with status 1.  Lower layers wrap
the underlying exception with a short context prefix:

    try:
        names = await list_players(bus)
    except DBusError as e:
        raise MprisCtrlError(f"list players: {e}") from e
"""


class MprisCtrlError(Exception):
    """Setup or bus failure that prevents even attempting the command."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def wrap(self, context: str) -> "MprisCtrlError":
        """Return a new error with *context* prepended, chained to this one."""
        err = MprisCtrlError(f"{context}: {self.message}")
        err.__cause__ = self
        return err
