"""Tests for the versioned snapshot cache."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tokentax.cache import TaxonomyCache
from tokentax.errors import Expired, NotFound
from tokentax.models import Taxonomy


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def test_put_and_get(clock):
    cache = TaxonomyCache(clock=clock)
    snapshot = Taxonomy(version="1.0")
    entry = cache.put("1.0", snapshot)

    assert entry.expires_at == clock.now + timedelta(days=1)
    assert cache.get("1.0") is snapshot
    assert "1.0" in cache


def test_missing_version(clock):
    with pytest.raises(NotFound):
        TaxonomyCache(clock=clock).get("9.9")


def test_expiry_is_lazy_and_evicts(clock):
    cache = TaxonomyCache(ttl=timedelta(hours=1), clock=clock)
    cache.put("1.0", Taxonomy(version="1.0"))

    clock.advance(minutes=59)
    assert cache.get("1.0").version == "1.0"

    clock.advance(minutes=1)
    assert len(cache) == 1
    assert "1.0" not in cache
    with pytest.raises(Expired):
        cache.get("1.0")
    assert len(cache) == 0
    # Expired is a NotFound
    with pytest.raises(NotFound):
        cache.get("1.0")


def test_explicit_expiry_and_replace(clock):
    cache = TaxonomyCache(clock=clock)
    cache.put("1.0", Taxonomy(version="1.0"), expires_at=clock.now + timedelta(seconds=5))
    newer = Taxonomy(version="1.0")
    cache.put("1.0", newer)

    clock.advance(seconds=10)
    assert cache.get("1.0") is newer


def test_evict_and_clear(clock):
    cache = TaxonomyCache(clock=clock)
    cache.put("1.0", Taxonomy(version="1.0"))
    cache.put("2.0", Taxonomy(version="2.0"))

    assert cache.versions() == ["1.0", "2.0"]
    assert cache.evict("1.0")
    assert not cache.evict("1.0")
    cache.clear()
    assert len(cache) == 0
