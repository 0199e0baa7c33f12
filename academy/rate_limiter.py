"""
In-memory fixed-window rate limiting utilities

Counters live in process memory and are pruned opportunistically once the
table grows past MAX_BUCKETS. Each worker process keeps its own counts.
"""

import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from fastapi import Request, Response

from .exceptions import ApiError

logger = logging.getLogger(__name__)

# Pruning only runs once the table is larger than this
MAX_BUCKETS = 5000


@dataclass
class Bucket:
    count: int
    expires_at: float


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float


class RateLimiter:
    """Maps a key to a request count and the time its window ends"""

    def __init__(self, clock: Callable[[], float] = time.time, max_buckets: int = MAX_BUCKETS):
        self._clock = clock
        self._max_buckets = max_buckets
        self._buckets: dict[str, Bucket] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune_expired(self, now: float) -> None:
        if len(self._buckets) <= self._max_buckets:
            return
        expired = [k for k, b in self._buckets.items() if b.expires_at <= now]
        for k in expired:
            del self._buckets[k]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired rate limit buckets")

    def hit(self, key: str, limit: int, window_seconds: float) -> RateLimitResult:
        """Count one request against ``key`` and report whether it is allowed"""
        with self._lock:
            now = self._clock()
            self._prune_expired(now)

            existing = self._buckets.get(key)
            if existing is None or existing.expires_at <= now:
                expires_at = now + window_seconds
                self._buckets[key] = Bucket(count=1, expires_at=expires_at)
                return RateLimitResult(success=True, remaining=limit - 1, reset_at=expires_at)

            if existing.count >= limit:
                return RateLimitResult(success=False, remaining=0, reset_at=existing.expires_at)

            existing.count += 1
            return RateLimitResult(
                success=True,
                remaining=max(limit - existing.count, 0),
                reset_at=existing.expires_at,
            )

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


# Shared by every route in this process
limiter = RateLimiter()


def get_client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or "unknown"
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def create_rate_limiter(
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    rate_limiter: Optional[RateLimiter] = None,
):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        rate_limit_forgot_password = create_rate_limiter(
            limit=3, window_seconds=600, key_prefix="forgot-password"
        )

        @router.post("/forgot-password")
        async def forgot_password(
            data: ForgotPasswordRequest,
            _: None = Depends(rate_limit_forgot_password),
        ):
            ...
    """

    async def rate_limit_dependency(request: Request, response: Response):
        store = rate_limiter or limiter
        key = f"{key_prefix}:{get_client_identifier(request)}"
        result = store.hit(key, limit, window_seconds)

        if not result.success:
            retry_after = max(0, math.ceil(result.reset_at - time.time()))
            logger.warning(f"Rate limit exceeded for {key} ({limit} per {window_seconds}s)")
            raise ApiError(
                429,
                f"Too many requests. Please try again in {retry_after} seconds.",
                headers={"Retry-After": str(retry_after)},
            )

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(result.reset_at))

    return rate_limit_dependency
