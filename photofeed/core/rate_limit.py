"""
Process-wide fixed-window rate limiting by client IP
"""
import logging
import math
import threading
import time
from typing import Callable, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from photofeed.core.exceptions import TooManyRequests
from photofeed.utils.responses import error_response

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """
    Allow at most ``limit`` hits per key in each window of ``window_seconds``.

    Windows start at a key's first hit and reset once they have elapsed.
    """

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> Tuple[bool, int]:
        """
        Count a request for ``key``.

        Returns:
            Tuple of (allowed, seconds until the current window resets)
        """
        now = self.clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0

            count += 1
            self._windows[key] = (started, count)
            retry_after = max(1, math.ceil(started + self.window_seconds - now))

            if len(self._windows) > 10000:
                self._evict(now)

        return count <= self.limit, retry_after

    def _evict(self, now: float):
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


def get_client_ip(request: Request) -> str:
    """
    Socket peer of the request.

    Forwarded headers are applied upstream by ``ProxyHeadersMiddleware``, and
    only for trusted proxies.
    """
    if request.client:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answer 429 once a client IP exceeds its window, whatever the endpoint."""

    def __init__(self, app, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        ip = get_client_ip(request)
        allowed, retry_after = self.limiter.hit(ip)

        if not allowed:
            logger.warning("Rate limit exceeded for %s", ip)
            exc = TooManyRequests(headers={"Retry-After": str(retry_after)})
            return error_response(message=exc.message, status_code=exc.status_code, headers=exc.headers)

        return await call_next(request)
