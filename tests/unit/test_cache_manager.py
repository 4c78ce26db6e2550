"""Unit tests for the namespaced in-memory cache."""

from __future__ import annotations

import threading

import pytest

from app.cache.manager import CacheManager
from app.cache.manager import CacheMiss
from app.cache.manager import build_caches
from app.core.config import CACHE_NAMESPACES
from app.core.config import CacheConfig
from app.core.result import Failure
from app.core.result import Success
from app.validation.schema import ValidationFailure


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def test_set_then_get_counts_hits_and_misses(clock: FakeClock) -> None:
    cache = CacheManager("product", clock=clock)

    assert cache.set(key="abc", value={"name": "Mouse"}) is True
    hit = cache.get(key="abc")
    miss = cache.get(key="other")

    assert isinstance(hit, Success)
    assert hit.data == {"name": "Mouse"}
    assert isinstance(miss, Failure)
    assert isinstance(miss.error, CacheMiss)
    assert str(miss.error) == "product:other"
    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.number_of_keys) == (1, 1, 1)


def test_entries_expire_after_ttl(clock: FakeClock) -> None:
    cache = CacheManager("user", clock=clock)
    cache.set(key="session", value=1, ttl=10)

    clock.advance(9)
    assert isinstance(cache.get(key="session"), Success)

    clock.advance(2)
    assert isinstance(cache.get(key="session"), Failure)
    assert cache.stats().number_of_keys == 0


def test_default_ttl_is_used_when_none_given(clock: FakeClock) -> None:
    cache = CacheManager("order", CacheConfig(std_ttl=60, check_period=3600, max_keys=10), clock=clock)
    cache.set(key="k", value="v")

    clock.advance(59)
    assert isinstance(cache.get(key="k"), Success)
    clock.advance(2)
    assert isinstance(cache.get(key="k"), Failure)


def test_periodic_sweep_removes_expired_entries(clock: FakeClock) -> None:
    cache = CacheManager("product", CacheConfig(std_ttl=600, check_period=60, max_keys=10), clock=clock)
    cache.set(key="short", value=1, ttl=5)
    cache.set(key="long", value=2)

    clock.advance(61)
    cache.set(key="fresh", value=3)

    assert cache.stats().number_of_keys == 2


def test_full_namespace_evicts_entries_closest_to_expiry(clock: FakeClock) -> None:
    cache = CacheManager("product", CacheConfig(std_ttl=600, check_period=3600, max_keys=10), clock=clock)
    for index in range(10):
        cache.set(key=f"k{index}", value=index, ttl=100 + index)

    cache.set(key="k10", value=10, ttl=500)

    assert cache.stats().number_of_keys == 10
    assert isinstance(cache.get(key="k0"), Failure)
    assert isinstance(cache.get(key="k1"), Success)
    assert isinstance(cache.get(key="k10"), Success)


def test_overwriting_existing_key_does_not_evict(clock: FakeClock) -> None:
    cache = CacheManager("product", CacheConfig(std_ttl=600, check_period=3600, max_keys=2), clock=clock)
    cache.set(key="a", value=1)
    cache.set(key="b", value=2)

    cache.set(key="a", value=3)

    assert cache.get(key="a").data == 3
    assert cache.stats().number_of_keys == 2


def test_invalid_keys_and_null_values_are_rejected(clock: FakeClock) -> None:
    cache = CacheManager("product", clock=clock)

    with pytest.raises(ValidationFailure, match="Cache key cannot be empty"):
        cache.set(key="  ", value=1)
    with pytest.raises(ValidationFailure, match="Cache value must not be null"):
        cache.set(key="k", value=None)
    with pytest.raises(ValidationFailure, match="Cache key too long"):
        cache.get(key="x" * 251)


def test_delete_and_flush(clock: FakeClock) -> None:
    cache = CacheManager("product", clock=clock)
    cache.set(key="a", value=1)
    cache.set(key="b", value=2)
    cache.set(key="c", value=3)
    cache.get(key="a")

    assert cache.delete(keys="a") == 1
    assert cache.delete(keys=["b", "missing"]) == 1

    cache.flush()
    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.number_of_keys) == (0, 0, 0)


def test_unknown_namespace_is_rejected() -> None:
    with pytest.raises(ValueError):
        CacheManager("sessions")


def test_build_caches_creates_every_namespace() -> None:
    caches = build_caches()

    assert sorted(caches) == sorted(CACHE_NAMESPACES)
    assert caches["rate-limit"].namespace == "rate-limit"


def test_concurrent_writers_with_eviction_keep_the_namespace_bounded() -> None:
    cache = CacheManager("product", CacheConfig(std_ttl=600, check_period=3600, max_keys=50))
    errors: list[BaseException] = []

    def writer(worker: int) -> None:
        try:
            for index in range(500):
                cache.set(key=f"{worker}-{index}", value=index)
                cache.get(key=f"{worker}-{index // 2}")
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    stats = cache.stats()
    assert stats.number_of_keys <= 50
    assert stats.hits + stats.misses == 8 * 500
