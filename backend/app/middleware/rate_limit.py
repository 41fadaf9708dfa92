"""
CrudCamp Backend — Rate Limiting Middleware
=============================================

What:  Per-IP sliding window rate limiter.
How:   Keeps request timestamps per (bucket, IP) in memory. Two buckets:
         "api"  → every non-excluded path, `rate_limit_requests` per window
         "auth" → /api/auth/* only, `auth_rate_limit_requests` per window
       An auth request counts against both buckets.

Algorithm: Sliding Window Log
    1. Drop timestamps older than the window
    2. If remaining count >= limit, reject with 429 + Retry-After
    3. Otherwise record the current timestamp and continue

Limitation: state is per process. Multiple uvicorn workers each keep their
own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

AUTH_PATH_PREFIX = "/api/auth/"

BucketKey = Tuple[str, str]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Excluded paths: /health and the OpenAPI docs.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Full sweep of idle buckets every N recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[BucketKey, List[float]] = defaultdict(list)
        self._recorded = 0

    def _limits_for(self, path: str) -> List[Tuple[str, int]]:
        limits = [("api", settings.rate_limit_requests)]
        if path.startswith(AUTH_PATH_PREFIX):
            limits.append(("auth", settings.auth_rate_limit_requests))
        return limits

    def _check(self, client_ip: str, path: str, now: float) -> Optional[int]:
        """
        Returns seconds to wait if any bucket is full, otherwise records the
        request in every applicable bucket and returns None.
        """
        window = settings.rate_limit_window
        window_start = now - window
        keys = []
        for bucket, limit in self._limits_for(path):
            key = (bucket, client_ip)
            hits = [ts for ts in self._requests[key] if ts > window_start]
            self._requests[key] = hits
            if len(hits) >= limit:
                return int(hits[0] + window - now) + 1
            keys.append(key)

        for key in keys:
            self._requests[key].append(now)

        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive(window_start)
        return None

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        retry_after = self._check(client_ip, path, time.time())
        if retry_after is not None:
            logger.warning(
                "Rate limit exceeded for IP %s on %s (retry in %ds)",
                client_ip,
                path,
                retry_after,
            )
            # Middleware runs outside the exception handlers; build the
            # 429 body from the exception directly
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Remove buckets with no timestamps inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit buckets", len(inactive))
