"""
Fixed-window, per-client rate limiting backed by Redis counters.
"""
import logging
import time
from typing import Optional

from fastapi import Request, status
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from perks.core.config import settings
from perks.core.responses import error_response
from perks.managers.redis_manager import AsyncRedisManager, redis_manager

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limit each client to ``max_requests`` per ``window_seconds`` on paths
    under ``path_prefix``. When Redis cannot be reached requests are let
    through and a warning is logged.
    """

    def __init__(
        self,
        app,
        max_requests: int = settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = settings.RATE_LIMIT_WINDOW_SECONDS,
        path_prefix: str = settings.API_PREFIX + "/",
        key_prefix: str = settings.RATE_LIMIT_KEY_PREFIX,
        manager: Optional[AsyncRedisManager] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.key_prefix = key_prefix
        self.manager = manager or redis_manager

    def _window_key(self, client: str) -> str:
        window = int(time.time()) // self.window_seconds
        return f"{self.key_prefix}{client}:{window}"

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client = client_identifier(request)
        try:
            hits, reset_in = await self.manager.increment_window(self._window_key(client), self.window_seconds)
        except (RedisError, OSError) as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return await call_next(request)

        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(0, self.max_requests - hits)),
            "RateLimit-Reset": str(reset_in),
        }

        if hits > self.max_requests:
            logger.warning(f"Rate limit exceeded for {client} ({hits} requests in window)")
            headers["Retry-After"] = str(reset_in)
            return error_response(RATE_LIMIT_MESSAGE, status.HTTP_429_TOO_MANY_REQUESTS, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
