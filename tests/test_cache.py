"""Tests for the TTL cache service."""

from __future__ import annotations

from scholarscope.cache import TTLCache

from tests.conftest import FakeClock


def test_fresh_entry_is_returned() -> None:
    clock = FakeClock()
    cache = TTLCache("t", ttl=60, clock=clock)
    cache.set("k", "v")
    clock.advance(59)
    assert cache.get("k") == "v"


def test_expired_entry_is_dropped_lazily() -> None:
    clock = FakeClock()
    cache = TTLCache("t", ttl=60, clock=clock)
    cache.set("k", "v")
    clock.advance(60)
    assert cache.get("k", "missing") == "missing"
    assert len(cache) == 0


def test_get_or_compute_computes_once_within_ttl() -> None:
    clock = FakeClock()
    cache = TTLCache("t", ttl=60, clock=clock)
    calls = []

    def compute():
        calls.append(1)
        return len(calls)

    assert cache.get_or_compute("k", compute) == 1
    assert cache.get_or_compute("k", compute) == 1
    clock.advance(61)
    assert cache.get_or_compute("k", compute) == 2


def test_should_store_skips_degraded_values() -> None:
    cache = TTLCache("t", ttl=60)
    assert cache.get_or_compute("k", lambda: None, should_store=lambda v: v is not None) is None
    assert len(cache) == 0


def test_last_write_wins_and_clear() -> None:
    cache = TTLCache("t", ttl=60)
    cache.set("k", 1)
    cache.set("k", 2)
    assert cache.get("k") == 2
    cache.clear()
    assert cache.get("k") is None
