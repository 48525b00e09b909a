"""
In-memory fixed-window rate limiting for public endpoints.

Counters live in process memory, so limits are per worker. Keys are the
client IP address plus the request path.
"""

import logging
import time
from threading import Lock
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request, status

from core.constants import (
    BOOKING_RATE_LIMIT_MAX_REQUESTS, BOOKING_RATE_LIMIT_WINDOW_SECONDS,
    PUBLIC_CANCEL_RATE_LIMIT_MAX_REQUESTS, PUBLIC_CANCEL_RATE_LIMIT_WINDOW_SECONDS
)

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """
    Allow at most ``max_requests`` hits per key per ``window_seconds``.

    Args:
        name: Label used in log lines
        max_requests: Hits allowed per window
        window_seconds: Window length
        clock: Time source, seconds (monotonic by default)
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # {key: (window_start, count)}
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = Lock()

    def hit(self, key: str) -> Tuple[bool, int]:
        """
        Record one request for ``key``.

        Returns:
            (allowed, retry_after_seconds); retry_after is 0 when allowed
        """
        now = self._clock()
        with self._lock:
            window_start, count = self._windows.get(key, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            if count >= self.max_requests:
                retry_after = max(1, int(window_start + self.window_seconds - now))
                return False, retry_after

            self._windows[key] = (window_start, count + 1)
            self._cleanup(now)
            return True, 0

    def _cleanup(self, now: float) -> None:
        expired = [key for key, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def dependency(self) -> Callable[[Request], None]:
        """FastAPI dependency that raises 429 when the caller is over the limit for this path."""
        def check_rate_limit(request: Request) -> None:
            client_ip = request.client.host if request.client else "unknown"
            allowed, retry_after = self.hit(f"{client_ip}:{request.url.path}")
            if not allowed:
                logger.warning(f"Rate limit '{self.name}' exceeded for {client_ip} on {request.url.path}")
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Too many requests, please try again later",
                    headers={"Retry-After": str(retry_after)},
                )
        return check_rate_limit


booking_limiter = FixedWindowRateLimiter(
    "booking", BOOKING_RATE_LIMIT_MAX_REQUESTS, BOOKING_RATE_LIMIT_WINDOW_SECONDS
)
public_cancel_limiter = FixedWindowRateLimiter(
    "public_cancel", PUBLIC_CANCEL_RATE_LIMIT_MAX_REQUESTS, PUBLIC_CANCEL_RATE_LIMIT_WINDOW_SECONDS
)
