from __future__ import annotations

import pytest

from core.dedup import TTLCache, dedup_key
from fakes import FakeClock


def test_dedup_key_joins_source_and_item() -> None:
    assert dedup_key("artblog", "12345") == "artblog@12345"


def test_add_is_get_or_set() -> None:
    cache = TTLCache(60, clock=FakeClock(0))

    assert cache.add("k") is True
    assert cache.add("k") is False
    assert cache.get("k") is True


def test_entries_expire_after_default_ttl() -> None:
    clock = FakeClock(0)
    cache = TTLCache(60, clock=clock)
    cache.set("k", "v")

    clock.now = 59
    assert "k" in cache
    clock.now = 60
    assert "k" not in cache
    assert cache.get("k") is None
    # Expired keys can be re-added.
    assert cache.add("k") is True


def test_purge_drops_only_expired_entries() -> None:
    clock = FakeClock(0)
    cache = TTLCache(60, clock=clock)
    cache.set("old", 1)
    clock.now = 30
    cache.set("new", 2)

    clock.now = 61
    assert cache.purge_expired() == 1
    assert len(cache) == 1
    assert cache.get("new") == 2


def test_explicit_ttl_overrides_default() -> None:
    clock = FakeClock(0)
    cache = TTLCache(60, clock=clock)
    cache.set("k", 1, ttl=5)

    clock.now = 6
    assert cache.get("k") is None


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        TTLCache(0)
