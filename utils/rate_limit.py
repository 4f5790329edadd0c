"""Sliding-window request quota keyed by client.

Each key keeps the timestamps of its admitted requests; a request is admitted
while fewer than ``limit`` timestamps fall inside the trailing window.
Rejected requests are not recorded, so a client regains capacity as its
oldest admitted request ages out. Keys whose window has emptied are dropped,
at the latest one window after they went idle.
"""

import math
import threading
from collections import deque
from time import monotonic


class SlidingWindowLimiter:
    """Per-key request quota over a trailing window."""

    __slots__ = ("limit", "window_seconds", "_clock", "_lock", "_hits", "_last_sweep")

    def __init__(self, limit: int, window_seconds: float, clock=monotonic) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, deque] = {}
        self._last_sweep = None

    def __len__(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._hits)

    def _prune(self, hits: deque, now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str) -> tuple[bool, int]:
        """Record a request for ``key``.

        Returns ``(allowed, retry_after_seconds)``; retry_after is 0 when allowed.
        """
        now = self._clock()
        with self._lock:
            if self._last_sweep is None:
                self._last_sweep = now
            elif now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits.get(key)
            if hits is not None:
                self._prune(hits, now)
                if len(hits) >= self.limit:
                    retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
                    return False, retry_after
            else:
                hits = self._hits[key] = deque()
            hits.append(now)
            return True, 0

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
