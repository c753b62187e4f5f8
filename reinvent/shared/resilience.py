# reinvent/shared/resilience.py
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Mapping, Tuple

import structlog

logger = structlog.get_logger()

# --- 1. Custom Exceptions ---

class ResilienceError(Exception):
    """Base class for resilience-related errors."""
    pass

class RateLimitExceededError(ResilienceError):
    """Raised when a client has used up its request budget for a bucket."""
    def __init__(self, bucket: str, retry_after: float):
        self.bucket = bucket
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded. Please try again later.")

# --- 2. Sliding Window Rate Limiter ---

class SlidingWindowRateLimiter:
    """
    Per-client request budget over a rolling time window.

    Each (bucket, client) pair keeps the timestamps of its admitted requests.
    A new request is admitted when fewer than `limits[bucket]` timestamps fall
    inside the last `window_seconds`; rejected requests are not recorded.
    Buckets without a configured limit are never throttled.
    """
    def __init__(
        self,
        limits: Mapping[str, int],
        window_seconds: float = 300.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limits = dict(limits)
        self.window_seconds = window_seconds
        self.enabled = enabled
        self._clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    @property
    def tracked_clients(self) -> int:
        """Number of (bucket, client) pairs with hits still inside the window."""
        with self._lock:
            return len(self._hits)

    def check(self, bucket: str, client: str) -> None:
        """Records a hit or raises RateLimitExceededError."""
        if not self.enabled:
            return
        limit = self.limits.get(bucket)
        if limit is None:
            return

        now = self._clock()
        key = (bucket, client)
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            count = 0
            hits = self._hits.get(key)
            if hits is not None:
                self._prune(hits, now)
                if not hits:
                    del self._hits[key]
                count = len(hits)

            if count >= limit:
                logger.warning("rate_limit_exceeded", bucket=bucket, client=client, limit=limit)
                raise RateLimitExceededError(bucket, self.window_seconds)

            self._hits.setdefault(key, deque()).append(now)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Drops every pair whose hits have all left the window. Caller holds the lock."""
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now
