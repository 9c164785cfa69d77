"""Custom middleware for request handling."""

import logging
import time
import uuid
from typing import Awaitable, Callable, Dict, List

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from e2c.auth import decode_access_token, extract_token
from e2c.config import get_settings

SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-rapidapi-key"}


class AuthMiddleware(BaseHTTPMiddleware):
    """Extract user ID from the session token and attach to request state."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        token = extract_token(request)
        if token:
            try:
                request.state.user_id = str(decode_access_token(token))
            except HTTPException:
                # get_current_user rejects it on protected routes
                pass
        return await call_next(request)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with redacted headers."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = logging.getLogger("e2c.http")

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.logger.log(
            level,
            "http_request %s %s %s %.2fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
                "headers": redact_headers(request.headers),
            },
        )
        return response


def redact_headers(headers) -> dict:
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiting middleware."""

    def __init__(self, app):
        super().__init__(app)
        self.requests: Dict[str, List[float]] = {}
        self.settings = get_settings()
        self._last_sweep = time.time()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Skip rate limiting for health checks
        if request.url.path == "/health":
            return await call_next(request)

        # Get user ID from request state set by AuthMiddleware
        user_id = getattr(request.state, "user_id", None) or (
            request.client.host if request.client else "anonymous"
        )

        current_time = time.time()
        window_start = current_time - self.settings.rate_limit_window

        if current_time - self._last_sweep >= self.settings.rate_limit_window:
            self.prune(window_start)
            self._last_sweep = current_time

        # Clean old entries
        self.requests[user_id] = [
            ts for ts in self.requests.get(user_id, []) if ts > window_start
        ]

        # Check rate limit
        if len(self.requests[user_id]) >= self.settings.rate_limit_requests:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": {
                        "code": "RATE_LIMITED",
                        "message": "Too many requests",
                        "details": {"retry_after": self.settings.rate_limit_window},
                    }
                },
            )

        # Record request
        self.requests[user_id].append(current_time)

        return await call_next(request)

    def prune(self, window_start: float) -> None:
        """Forget clients with no requests inside the current window."""
        stale = [
            key
            for key, stamps in self.requests.items()
            if not stamps or stamps[-1] <= window_start
        ]
        for key in stale:
            del self.requests[key]
