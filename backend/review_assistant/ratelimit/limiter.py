"""In-memory fixed-window rate limiter.

Counts are per process: each instance bounds abuse from its own share of
traffic, and nothing survives a restart.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateLimitEntry:
    """Request count for one identifier in its current window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single ``check``."""

    allowed: bool
    remaining: int
    reset_at: float

    @property
    def reset_at_ms(self) -> int:
        return int(self.reset_at * 1000)


class RateLimiter:
    """Fixed-window counter keyed by client identifier.

    ``check``, ``reset`` and ``sweep`` share one lock: the periodic sweep runs
    on a scheduler worker thread while checks run on the event loop.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Clock = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitResult:
        """Count a request for ``identifier`` and decide whether it may pass."""
        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                self._entries[identifier] = entry
                return RateLimitResult(
                    allowed=True,
                    remaining=self.limit - 1,
                    reset_at=entry.reset_at,
                )

            entry.count += 1
            return RateLimitResult(
                allowed=entry.count <= self.limit,
                remaining=max(0, self.limit - entry.count),
                reset_at=entry.reset_at,
            )

    def reset(self, identifier: str) -> None:
        """Forget ``identifier`` entirely."""
        with self._lock:
            self._entries.pop(identifier, None)

    def sweep(self) -> int:
        """Drop entries whose window has elapsed. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.reset_at < now]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug("Swept %d expired rate-limit entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
