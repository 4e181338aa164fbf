"""
HTTP Middleware
===============

CORS, per-client rate limiting and access logging for the Footballer API.

Usage:
    from footballer_api.middleware import setup_middleware
    setup_middleware(app)
"""

import logging
import time
import uuid
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Optional, Tuple

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from footballer_api.config import settings

logger = logging.getLogger(__name__)

# Probe endpoints that neither count against the limit nor get logged
PROBE_PATHS = {"/health", "/ready", "/live"}


def get_client_ip(request: Request) -> str:
    """Client address, honouring X-Forwarded-For and X-Real-IP from a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


# =============================================================================
# ACCESS LOG
# =============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, tagged with a short request id that is also
    returned in X-Request-ID. 4xx log at WARNING, 5xx at ERROR.
    """

    SKIP_PATHS = PROBE_PATHS | {"/favicon.ico"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            status_code = response.status_code if response is not None else 500
            elapsed_ms = (time.perf_counter() - started) * 1000
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"

            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO

            logger.log(
                level,
                f"{request.method} {target} {status_code} {elapsed_ms:.1f}ms "
                f"id={request_id} client={get_client_ip(request)}"
            )


# =============================================================================
# RATE LIMITING
# =============================================================================

class InMemoryRateLimiter:
    """
    Sliding-window request counter per client key.

    The effective ceiling is min(requests_per_minute, burst_limit). State is
    per process, so each uvicorn worker limits on its own.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        burst_limit: int = 100,
        window_seconds: int = 60,
    ):
        self.requests_per_minute = requests_per_minute
        self.burst_limit = burst_limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_cleanup = time.time()

    @property
    def ceiling(self) -> int:
        return min(self.requests_per_minute, self.burst_limit)

    def cleanup(self, now: Optional[float] = None) -> int:
        """Forget clients with no hit inside the window; returns how many."""
        now = time.time() if now is None else now
        window_start = now - self.window_seconds
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in stale:
            del self._hits[key]
        self._last_cleanup = now
        return len(stale)

    def is_allowed(self, client_key: str) -> Tuple[bool, int]:
        """Record a hit for client_key; returns (allowed, remaining)."""
        now = time.time()
        if now - self._last_cleanup >= self.window_seconds:
            self.cleanup(now)

        hits = self._hits[client_key]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.ceiling:
            return False, 0

        hits.append(now)
        return True, max(0, self.requests_per_minute - len(hits))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients over their limit with 429 and Retry-After."""

    EXEMPT_PATHS = PROBE_PATHS | {"/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: FastAPI, limiter: InMemoryRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        client_key = f"ip:{get_client_ip(request)}"
        allowed, remaining = self.limiter.is_allowed(client_key)

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_key}")
            # Raised HTTPExceptions bypass the app's handlers here
            return ORJSONResponse(
                status_code=429,
                content={"detail": "rate limit exceeded"},
                headers={"Retry-After": str(self.limiter.window_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


# =============================================================================
# SETUP
# =============================================================================

def setup_middleware(app: FastAPI) -> None:
    """Install CORS, rate limiting (when enabled) and access logging."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Location", "X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
    )

    if settings.rate_limit_enabled:
        limiter = InMemoryRateLimiter(
            requests_per_minute=settings.rate_limit_requests,
            burst_limit=settings.rate_limit_burst,
            window_seconds=settings.rate_limit_window,
        )
        app.add_middleware(RateLimitMiddleware, limiter=limiter)

    # Last added runs outermost, so it sees every response
    app.add_middleware(RequestLoggingMiddleware)

    logger.info(
        f"Middleware configured: rate_limit="
        f"{settings.rate_limit_requests}/{settings.rate_limit_window}s"
        f"{'' if settings.rate_limit_enabled else ' (disabled)'}, "
        f"cors_origins={len(settings.cors_origins_list)}"
    )
