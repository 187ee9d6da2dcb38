import os
import time
from collections import defaultdict
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from barsocial.errors import APIError, ErrorMessages, error_response
import logging

logger = logging.getLogger(__name__)

MAX_REQUESTS_PER_MINUTE = int(os.getenv("MAX_REQUESTS_PER_MINUTE", "120"))

# Endpoints that should be exempt from rate limiting
RATE_LIMIT_EXEMPT_PATHS = {
    "/health",
}

class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP fixed-window rate limiting applied to all requests"""

    def __init__(self, app, max_requests_per_minute: int = MAX_REQUESTS_PER_MINUTE, exempt_paths=None):
        super().__init__(app)
        self.max_requests_per_minute = max_requests_per_minute
        self.exempt_paths = exempt_paths if exempt_paths is not None else RATE_LIMIT_EXEMPT_PATHS
        # In-memory rate limiting storage
        self.rate_limit_data = defaultdict(lambda: {"count": 0, "reset_time": time.time() + 60})

    async def dispatch(self, request: Request, call_next):
        # Skip rate limiting for exempt paths
        if any(request.url.path.endswith(path) for path in self.exempt_paths):
            return await call_next(request)

        try:
            self._check_rate_limit(request)
        except APIError as e:
            logger.warning(f"Rate limit exceeded for IP: {self._client_ip(request)}")
            return error_response(e.status, e.message)

        return await call_next(request)

    @staticmethod
    def _client_ip(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _check_rate_limit(self, request: Request):
        """Check rate limit for the requesting IP"""
        ip = self._client_ip(request)
        now = time.time()
        record = self.rate_limit_data[ip]

        # Reset counter if time window has passed
        if now > record["reset_time"]:
            record["count"] = 0
            record["reset_time"] = now + 60

        if record["count"] >= self.max_requests_per_minute:
            raise APIError(ErrorMessages.RATE_LIMITED, 429, True)

        record["count"] += 1
