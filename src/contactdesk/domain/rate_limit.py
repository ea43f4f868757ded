"""Per-client submission rate limiting.

Rolling window: the window starts at a client's first submission and lasts
``window`` from there, not aligned to wall-clock hours. A client gets
``max_count`` submissions per window; further ones are refused without
touching the counter.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from contactdesk.infra.rate_limit_store import RateLimitRecord, RateLimitStore
from contactdesk.infra.time import utc_now

DEFAULT_MAX_COUNT = 5
DEFAULT_WINDOW = timedelta(hours=1)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check.

    Attributes:
        allowed: False when the client must wait.
        retry_after: Seconds until the window resets (0 when allowed).
        record: The counter after the check.
    """

    allowed: bool
    retry_after: int
    record: RateLimitRecord


class RateLimiter:
    def __init__(
        self,
        store: RateLimitStore,
        *,
        max_count: int = DEFAULT_MAX_COUNT,
        window: timedelta = DEFAULT_WINDOW,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_count < 1:
            raise ValueError("max_count must be at least 1")
        self._store = store
        self._max_count = max_count
        self._window = window
        self._now = now
        # Read-modify-write below must not interleave between threads
        self._lock = threading.Lock()

    def check_and_increment(self, client_identity: str) -> RateLimitDecision:
        """Count a submission from ``client_identity`` if it is within limits."""
        with self._lock:
            now = self._now()
            record = self._store.get(client_identity)

            if record is None or now > record.window_reset_at:
                record = self._store.reset(client_identity, now + self._window)
                return RateLimitDecision(allowed=True, retry_after=0, record=record)

            if record.count < self._max_count:
                record = self._store.increment(client_identity)
                return RateLimitDecision(allowed=True, retry_after=0, record=record)

            wait = (record.window_reset_at - now).total_seconds()
            return RateLimitDecision(
                allowed=False,
                retry_after=max(1, math.ceil(wait)),
                record=record,
            )
