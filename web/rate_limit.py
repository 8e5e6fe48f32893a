"""Simple per-address rate limiting to mitigate abuse of the API."""

from __future__ import annotations

import math
import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, FrozenSet

from flask import Flask, g, request

from core import get_logger, RateLimitDefaults
from core.exceptions import RateLimitError
from web.identity import resolve_identity

logger = get_logger(__name__)


class RateLimiter:
    """Sliding-window limiter keyed by caller address.

    Allows ``max_requests`` per ``window_seconds``; health and status checks
    are exempt.
    """

    def __init__(
        self,
        max_requests: int = RateLimitDefaults.MAX_REQUESTS,
        window_seconds: float = RateLimitDefaults.WINDOW_SECONDS,
        exempt_paths: FrozenSet[str] = RateLimitDefaults.EXEMPT_PATHS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window = window_seconds
        self.exempt_paths = exempt_paths
        self._clock = clock
        self._events: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> int:
        """Register one request for ``key``.

        Returns:
            Requests remaining in the current window

        Raises:
            RateLimitError: If the window is already full
        """
        now = self._clock()
        with self._lock:
            bucket = self._events[key]
            # Evict old timestamps
            while bucket and now - bucket[0] > self.window:
                bucket.popleft()

            if len(bucket) >= self.max_requests:
                retry_after = max(1, math.ceil(self.window - (now - bucket[0])))
                logger.warning("Rate limit exceeded for %s, retry in %ss", key, retry_after)
                raise RateLimitError(retry_after=retry_after)

            bucket.append(now)
            return self.max_requests - len(bucket)

    def init_app(self, app: Flask) -> None:
        @app.before_request
        def check_rate_limit():
            if request.path in self.exempt_paths:
                return None
            g.rate_limit_remaining = self.hit(resolve_identity().identity)
            return None

        @app.after_request
        def add_rate_limit_headers(response):
            remaining = g.pop("rate_limit_remaining", None)
            if remaining is not None:
                response.headers["RateLimit-Limit"] = str(self.max_requests)
                response.headers["RateLimit-Remaining"] = str(remaining)
            return response
