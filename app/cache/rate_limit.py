"""Fixed-window request limiter backed by the ``rate-limit`` cache namespace."""

from __future__ import annotations

from collections.abc import Callable
import logging
import math
import threading
import time

from app.cache.manager import CacheManager
from app.core.config import RateLimitPolicy
from app.core.errors import RateLimitError
from app.core.result import Success

logger = logging.getLogger(__name__)


def rate_limit_headers(policy: RateLimitPolicy, count: int) -> dict[str, str]:
    """``X-RateLimit-*`` headers describing the budget left after ``count`` requests."""
    return {
        "X-RateLimit-Limit": str(policy.max_requests),
        "X-RateLimit-Remaining": str(max(0, policy.max_requests - count)),
    }


class RateLimiter:
    """Count requests per client key and reject those over the policy budget."""

    def __init__(
        self,
        cache: CacheManager,
        *,
        clock: Callable[[], float] = time.time,
        enabled: bool = True,
    ) -> None:
        self._cache = cache
        self._clock = clock
        self._lock = threading.Lock()
        self.enabled = enabled

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def hit(self, key: str, policy: RateLimitPolicy) -> int:
        """Record one request for ``key``; returns the count inside the current window."""
        if not self.enabled:
            return 0

        with self._lock:
            now = self._now_ms()
            lookup = self._cache.get(key=key)
            if isinstance(lookup, Success):
                count = lookup.data["count"]
                first_request_ms = lookup.data["first_request_ms"]
            else:
                count = 0
                first_request_ms = now

            if now - first_request_ms > policy.window_ms:
                count = 1
                first_request_ms = now
            else:
                count += 1

            if count > policy.max_requests:
                retry_after = math.ceil((policy.window_ms - (now - first_request_ms)) / 1000)
                logger.warning("Rate limit exceeded for %s. Retry after %d seconds.", key, retry_after)
                raise RateLimitError(
                    policy.message,
                    details={"retryAfter": retry_after},
                    headers={**rate_limit_headers(policy, count), "Retry-After": str(retry_after)},
                )

            self._cache.set(
                key=key,
                value={"count": count, "first_request_ms": first_request_ms},
                ttl=math.ceil(policy.window_ms / 1000),
            )
        return count
