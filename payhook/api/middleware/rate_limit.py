"""Rate limiting middleware."""

import asyncio
import time
from collections import defaultdict, deque

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory sliding-window rate limiter.

    Limits are per process; run behind a shared limiter when scaling out.
    """

    def __init__(
        self,
        app,
        calls: int = 100,
        period: int = 60,
        exempt_paths: tuple[str, ...] = ("/api/webhook",),
    ) -> None:
        """Initialize rate limiter.

        Args:
            app: FastAPI/Starlette application
            calls: Max calls per period
            period: Period in seconds
            exempt_paths: API paths never limited (processor callbacks)
        """
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.exempt_paths = exempt_paths
        self.requests: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request with rate limiting."""
        path = request.url.path
        if not path.startswith("/api/") or path in self.exempt_paths:
            return await call_next(request)

        client_id = self._get_client_id(request)

        async with self._lock:
            allowed = self._is_allowed(client_id)
            if allowed:
                self._record_request(client_id)

        if not allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": f"Too many requests. Limit: {self.calls} per {self.period}s",
                    "code": "RATE_LIMITED",
                },
                headers={"Retry-After": str(self.period)},
            )

        return await call_next(request)

    def _get_client_id(self, request: Request) -> str:
        """Get client identifier for rate limiting.

        Priority:
        1. X-Forwarded-For header (for proxied requests)
        2. Client IP address
        """
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"

        client_host = request.client.host if request.client else "unknown"
        return f"ip:{client_host}"

    def _is_allowed(self, client_id: str) -> bool:
        """Check if request is within rate limit."""
        cutoff = time.monotonic() - self.period
        window = self.requests.get(client_id)
        if window is None:
            return self.calls > 0

        # Drop requests outside the window
        while window and window[0] <= cutoff:
            window.popleft()

        # Idle clients do not keep an entry
        if not window:
            del self.requests[client_id]

        return len(window) < self.calls

    def _record_request(self, client_id: str) -> None:
        self.requests[client_id].append(time.monotonic())

    def reset(self) -> None:
        """Clear all rate limit data. Useful for testing."""
        self.requests.clear()
