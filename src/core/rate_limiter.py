"""Per-user request throttling (core domain).

Each user gets a fixed window that starts on their first request and resets on
the first request after it expires. State is in memory only.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional

from core.config import RateLimitConfig

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateLimitEntry:
    count: int
    window_reset_at: float


class RateLimiter:
    """Bound each sender to max_requests per window."""

    def __init__(self, config: RateLimitConfig, clock: Clock = time.monotonic) -> None:
        self._config = config
        self._clock = clock
        self._entries: Dict[Hashable, RateLimitEntry] = {}
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> float:
        return self._config.window_seconds

    def check_and_consume(self, sender_id: Hashable) -> bool:
        """Return True if the request is allowed, consuming one slot."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(sender_id)
            if entry is None or now >= entry.window_reset_at:
                self._entries[sender_id] = RateLimitEntry(
                    count=1,
                    window_reset_at=now + self._config.window_seconds,
                )
                return True
            if entry.count >= self._config.max_requests:
                return False
            entry.count += 1
            return True

    def entry_for(self, sender_id: Hashable) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._entries.get(sender_id)
            if entry is None:
                return None
            return RateLimitEntry(entry.count, entry.window_reset_at)

    def __len__(self) -> int:
        return len(self._entries)

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.window_reset_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    async def run_sweeper(self) -> None:
        """Sweep every window until cancelled."""

        while True:
            await asyncio.sleep(self._config.window_seconds)
            removed = self.sweep()
            if removed:
                LOGGER.debug("Rate limiter sweep removed %s entries", removed)
