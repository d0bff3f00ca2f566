import pytest
from research_pipeline.retrieval.cache import ResponseCache
from research_pipeline.schemas.evidence import FetchResult

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

def result(url):
    return FetchResult(url=url, content=f"content of {url}")

def test_entry_expires_after_ttl():
    """
    WHY: Stale content must be refetched once the TTL has passed.
    HOW: Store an entry, advance a fake clock just inside and then past the TTL.
    EXPECTED: Hit inside the window, miss after it, and the entry is dropped.
    """
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=60, clock=clock)
    cache.put("https://a.com", result("https://a.com"))

    clock.now += 60
    assert cache.get("https://a.com") is not None

    clock.now += 1
    assert cache.get("https://a.com") is None
    assert len(cache) == 0

def test_least_recently_used_entry_is_evicted():
    """
    WHY: Memory is bounded; the coldest entry goes first.
    HOW: max_entries=2, insert a and b, read a, insert c.
    EXPECTED: b is evicted, a and c remain.
    """
    cache = ResponseCache(max_entries=2)
    cache.put("a", result("a"))
    cache.put("b", result("b"))
    assert cache.get("a") is not None
    cache.put("c", result("c"))

    assert cache.get("b") is None
    assert cache.get("a") is not None
    assert cache.get("c") is not None
    assert len(cache) == 2

def test_put_refreshes_timestamp():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    cache.put("a", result("a"))
    clock.now += 8
    cache.put("a", result("a"))
    clock.now += 8
    assert cache.get("a") is not None

def test_clear_and_invalid_size():
    cache = ResponseCache()
    cache.put("a", result("a"))
    cache.clear()
    assert len(cache) == 0
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)
