# ticket_hawk/clients/rate_limiter.py

"""Minimum-spacing rate limiter for outbound API requests."""

import logging
import time
from collections.abc import Callable

from ticket_hawk.config.settings import Settings

logger = logging.getLogger("ticket_hawk.rate_limiter")


class RateLimiter:
    """Enforce a floor on the gap between consecutive requests.

    A single "last request" timestamp is kept.  Before each request the
    caller is suspended for whatever remains of ``min_interval`` since that
    timestamp.  There is no burst allowance and no locking: one sequential
    caller per limiter.
    """

    def __init__(
        self,
        min_interval: float | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.min_interval: float = (
            Settings.MIN_REQUEST_INTERVAL
            if min_interval is None
            else min_interval
        )
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._last_request: float | None = None

    def wait(self) -> float:
        """Block until a request may be issued; return seconds slept."""
        waited = 0.0
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            if elapsed < self.min_interval:
                waited = self.min_interval - elapsed
                logger.debug(
                    "Rate limiting: waiting %.0fms", waited * 1000,
                )
                self._sleep(waited)
        self._last_request = self._clock()
        return waited
