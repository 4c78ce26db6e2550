"""Namespaced in-memory cache with per-entry TTL and bounded capacity."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from dataclasses import dataclass
import logging
import math
import threading
import time
from typing import Any

from app.core.config import CACHE_NAMESPACES
from app.core.config import DEFAULT_CACHE_CONFIG
from app.core.config import CacheConfig
from app.core.result import Failure
from app.core.result import Result
from app.core.result import Success
from app.validation.validators import cache_item_schema
from app.validation.validators import cache_key_schema

logger = logging.getLogger(__name__)

EVICTION_RATIO = 0.1


class CacheMiss(LookupError):
    """Key absent or expired."""


@dataclass
class _Entry:
    value: Any
    expires_at: float


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    number_of_keys: int


class CacheManager:
    """Key/value cache for one namespace.

    Entries expire after their TTL; expired entries are swept at most once per
    ``check_period``. When the namespace is full, the entries closest to expiry
    are evicted to make room. Public methods hold one lock, so a manager can be
    shared between the event loop and thread-pool endpoints.
    """

    def __init__(
        self,
        namespace: str,
        config: CacheConfig = DEFAULT_CACHE_CONFIG,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if namespace not in CACHE_NAMESPACES:
            raise ValueError(f"Unknown cache namespace: {namespace}")
        self.namespace = namespace
        self._config = config
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._hits = 0
        self._misses = 0
        self._last_sweep = clock()
        self._lock = threading.RLock()

    def _namespaced(self, key: str) -> str:
        return f"{self.namespace}:{cache_key_schema.parse(key)}"

    def _maybe_sweep(self) -> None:
        now = self._clock()
        if now - self._last_sweep < self._config.check_period:
            return
        self._last_sweep = now
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired keys from %s cache", len(expired), self.namespace)

    def get(self, *, key: str) -> Result[Any, CacheMiss]:
        namespaced = self._namespaced(key)
        with self._lock:
            self._maybe_sweep()
            entry = self._entries.get(namespaced)
            if entry is not None and entry.expires_at <= self._clock():
                del self._entries[namespaced]
                entry = None

            if entry is None:
                self._misses += 1
                logger.debug("Cache miss: %s", namespaced)
                return Failure(CacheMiss(namespaced))

            self._hits += 1
        logger.debug("Cache hit: %s", namespaced)
        return Success(entry.value)

    def set(self, *, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store ``value``; ``None`` values and invalid keys raise ``ValidationFailure``."""
        item = cache_item_schema.parse({"key": key, "value": value, "ttl": ttl})
        namespaced = f"{self.namespace}:{item.key}"
        lifetime = item.ttl if item.ttl is not None else self._config.std_ttl
        with self._lock:
            self._maybe_sweep()
            if namespaced not in self._entries and len(self._entries) >= self._config.max_keys:
                self._evict()
            self._entries[namespaced] = _Entry(value=item.value, expires_at=self._clock() + lifetime)
        logger.debug("Cache set: %s", namespaced)
        return True

    def delete(self, *, keys: str | Iterable[str]) -> int:
        if isinstance(keys, str):
            keys = [keys]
        namespaced_keys = [self._namespaced(key) for key in keys]
        deleted = 0
        with self._lock:
            for namespaced in namespaced_keys:
                if self._entries.pop(namespaced, None) is not None:
                    deleted += 1
        logger.debug("Cache delete in %s: %d keys", self.namespace, deleted)
        return deleted

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Cache flushed: %s", self.namespace)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, number_of_keys=len(self._entries))

    def _evict(self) -> None:
        count = math.ceil(self._config.max_keys * EVICTION_RATIO)
        oldest = sorted(self._entries, key=lambda key: self._entries[key].expires_at)[:count]
        for key in oldest:
            del self._entries[key]
        logger.info("Cache %s full; evicted %d keys", self.namespace, len(oldest))


def build_caches(config: CacheConfig = DEFAULT_CACHE_CONFIG) -> dict[str, CacheManager]:
    """Create one cache manager per namespace."""
    return {namespace: CacheManager(namespace, config) for namespace in CACHE_NAMESPACES}
