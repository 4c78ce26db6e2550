"""Service helpers for cache administration."""

from __future__ import annotations

from app.cache.manager import CacheManager
from app.core.errors import NotFoundError
from app.schemas.cache import CacheNamespaceStats


def cache_stats_service(caches: dict[str, CacheManager]) -> list[CacheNamespaceStats]:
    """Return hit/miss/key counts for every cache namespace."""
    stats = []
    for namespace, cache in caches.items():
        snapshot = cache.stats()
        stats.append(
            CacheNamespaceStats(
                namespace=namespace,
                hits=snapshot.hits,
                misses=snapshot.misses,
                number_of_keys=snapshot.number_of_keys,
            )
        )
    return stats


def flush_cache_service(caches: dict[str, CacheManager], namespace: str) -> None:
    cache = caches.get(namespace)
    if cache is None:
        raise NotFoundError("Cache namespace")
    cache.flush()
