"""
Modulith Backend — Rate Limiting Middleware
============================================

What:  Per-client sliding window rate limiter.
How:   Tracks request timestamps per client key in memory.
When:  First in the middleware chain; rejected requests never reach a handler.

Algorithm: Sliding Window Log
    1. Each client key gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise, record the current timestamp and let it through

Client key:
    First entry of X-Forwarded-For when present (the API usually runs behind
    a proxy), otherwise the socket peer address.

Headers (IETF draft-6 "RateLimit header fields"):
    RateLimit-Limit      requests allowed per window
    RateLimit-Remaining  requests left in the current window
    RateLimit-Reset      seconds until the oldest counted request expires
    Retry-After          on 429 only

The state lives in process memory and is only correct for a single worker.
"""

import logging
import math
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from modulith.config import settings
from modulith.middleware.client import client_address

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        limit: Max requests per window (default: settings.rate_limit_requests)
        window: Window duration in seconds (default: settings.rate_limit_window)

    Excluded paths:
        /health and the API documentation are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Inactive keys are swept every CLEANUP_INTERVAL recorded requests
    CLEANUP_INTERVAL = 1000

    def __init__(
        self,
        app: ASGIApp,
        limit: Optional[int] = None,
        window: Optional[int] = None,
    ) -> None:
        super().__init__(app)
        self.limit = limit if limit is not None else settings.rate_limit_requests
        self.window = window if window is not None else settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    @staticmethod
    def client_key(request: Request) -> str:
        """Resolve the key a request is counted against."""
        return client_address(request)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        key = self.client_key(request)
        now = time.time()
        window_start = now - self.window

        # ── Sliding Window: drop expired entries ──────────────────────────
        timestamps = [ts for ts in self._requests[key] if ts > window_start]
        self._requests[key] = timestamps

        # ── Check rate limit ──────────────────────────────────────────────
        if len(timestamps) >= self.limit:
            retry_after = max(1, math.ceil(timestamps[0] + self.window - now))

            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                key,
                len(timestamps),
                self.window,
            )

            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "retry_after": retry_after,
                },
                headers={
                    **self._headers(remaining=0, reset=retry_after),
                    "Retry-After": str(retry_after),
                },
            )

        # ── Record this request ───────────────────────────────────────────
        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_INTERVAL == 0:
            self._cleanup_inactive_keys(window_start)

        response = await call_next(request)

        reset = max(1, math.ceil(timestamps[0] + self.window - now))
        response.headers.update(
            self._headers(remaining=self.limit - len(timestamps), reset=reset)
        )
        return response

    def _headers(self, remaining: int, reset: int) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(max(remaining, 0)),
            "RateLimit-Reset": str(reset),
        }

    def _cleanup_inactive_keys(self, window_start: float) -> None:
        """Forget client keys with no requests inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))
