# mpris-ctrl
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Persisted "current player" index.

The index lives in a single file holding an 8-byte little-endian unsigned
integer.  The same file doubles as the process-wide lock: every invocation
takes an exclusive flock on it for its whole duration, so the index
read-modify-write is atomic across concurrent invocations.

Usage:
    with locked_index(path) as store:
        idx = store.load()
        store.store(idx + 1)
"""

import contextlib
import fcntl
import logging
import os
import struct

from .errors import MprisCtrlError

logger = logging.getLogger(__name__)

INDEX_FORMAT = "<Q"
INDEX_SIZE = struct.calcsize(INDEX_FORMAT)


class IndexStore:
    """Serialize/deserialize the index on an already-locked file object.

    Holds no locking logic of its own; see ``locked_index``.
    """

    def __init__(self, f):
        self._f = f

    def load(self) -> int:
        """Return the stored index, or 0 if the file is empty, short or unreadable."""
        try:
            self._f.seek(0)
            data = self._f.read(INDEX_SIZE)
        except OSError as e:
            logger.warning("Cannot read index, starting from 0: %s", e)
            return 0
        if len(data) < INDEX_SIZE:
            return 0
        return struct.unpack(INDEX_FORMAT, data)[0]

    def store(self, i: int) -> int:
        """Durably overwrite the stored index with *i* and return it.

        Write failures raise ``MprisCtrlError``.
        """
        data = struct.pack(INDEX_FORMAT, i)
        try:
            self._f.seek(0)
            self._f.write(data)
            self._f.truncate(INDEX_SIZE)
            self._f.flush()
            os.fsync(self._f.fileno())
        except OSError as e:
            raise MprisCtrlError(f"store index: {e}") from e
        logger.debug("Stored index %d", i)
        return i


@contextlib.contextmanager
def locked_index(path: str):
    """Open *path* (creating it), hold an exclusive lock, yield an ``IndexStore``.

    The lock is released and the file closed on every exit path.
    """
    try:
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as e:
        raise MprisCtrlError(f"create lock: {e}") from e

    f = os.fdopen(fd, "r+b")
    try:
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            raise MprisCtrlError(f"acquire lock: {e}") from e
        logger.debug("Locked %s", path)
        try:
            yield IndexStore(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    finally:
        f.close()
