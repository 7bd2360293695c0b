"""Bounded poll-until-or-timeout for asyncio callers.

Usage:
    from .polling import wait_until

    converged = await wait_until(lambda: player.playback_status() != before)

The predicate may be a plain function or return an awaitable.  Convergence is
best-effort: when the attempt budget runs out the caller simply carries on
with whatever state is observable.
"""

import asyncio
import inspect
import logging

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.075  # seconds between checks
DEFAULT_ATTEMPTS = 20


async def wait_until(predicate, interval: float = DEFAULT_INTERVAL,
                     attempts: int = DEFAULT_ATTEMPTS) -> bool:
    """Poll *predicate* every *interval* seconds, at most *attempts* times.

    Returns True as soon as the predicate holds, False if it never did.
    """
    for attempt in range(attempts):
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            logger.debug("Converged after %d check(s)", attempt + 1)
            return True
        await asyncio.sleep(interval)
    logger.debug("No convergence after %d checks", attempts)
    return False
