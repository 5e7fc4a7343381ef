from __future__ import annotations

import pytest

from conftest import FakeClock
from stockchart.services.cache import CacheTTL, ResponseCache, generate_key


def test_set_then_get(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)

    cache.set("quote:mock:AAPL", {"price": 1.0}, ttl=60)

    assert cache.get("quote:mock:AAPL") == {"price": 1.0}
    assert cache.has("quote:mock:AAPL")


def test_entry_expires_after_ttl(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)
    cache.set("k", "v", ttl=60)

    clock.advance(59)
    assert cache.get("k") == "v"

    clock.advance(1)
    assert cache.get("k") is None
    assert cache.size() == 0


def test_default_ttl(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)
    cache.set("k", "v")

    clock.advance(CacheTTL.DAILY)

    assert not cache.has("k")


def test_keys_differ_by_data_source(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)

    cache.set(generate_key("candles", "mock", "AAPL", "5"), ["mock bars"])

    assert cache.get(generate_key("candles", "alphavantage", "AAPL", "5")) is None


def test_evicts_oldest_when_full(clock: FakeClock) -> None:
    cache = ResponseCache(max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)

    cache.set("c", 3)

    assert cache.keys() == ["a", "c"]
    assert cache.get("a") == 10


def test_invalidate_and_prefix(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)
    cache.set("quote:mock:AAPL", 1)
    cache.set("quote:mock:MSFT", 2)
    cache.set("search:mock:app", 3)

    assert cache.invalidate("search:mock:app") is True
    assert cache.invalidate("search:mock:app") is False
    assert cache.invalidate_prefix("quote:") == 2
    assert len(cache) == 0


def test_clear_expired_counts_removed(clock: FakeClock) -> None:
    cache = ResponseCache(clock=clock)
    cache.set("short", 1, ttl=10)
    cache.set("long", 2, ttl=100)

    clock.advance(50)

    assert cache.clear_expired() == 1
    assert cache.keys() == ["long"]

    cache.clear()
    assert cache.size() == 0


def test_generate_key_skips_empty_parts() -> None:
    assert generate_key("candles", "mock", "AAPL", None, "", 0) == "candles:mock:AAPL:0"
    assert generate_key("quote", "finnhub", "TSLA") == "quote:finnhub:TSLA"


def test_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)
