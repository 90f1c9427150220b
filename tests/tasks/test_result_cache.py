"""
Unit tests for result_cache.py and redis_client.py

Tests cache keys, JSON storage with TTL, the caching listing source wrapper,
and redis connection management.
"""

import hashlib
import json

import pytest

from jobinsight.app.core.listing_source import SearchPage
from jobinsight.app.tasks import get_redis_client
from jobinsight.app.tasks.redis_client import RedisClient
from jobinsight.app.tasks.result_cache import (
    CachedListingSource,
    ResultCache,
    analytics_cache_key,
    search_cache_key,
)


class FakeRedis:
    """In-memory stand-in for the redis get/setex/delete API."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, name):
        return self.data.get(name)

    def setex(self, name, time, value):
        self.data[name] = value
        self.ttls[name] = time

    def delete(self, *names):
        for name in names:
            self.data.pop(name, None)
            self.ttls.pop(name, None)


class CountingSource:
    source_name = "counting"

    def __init__(self, page: SearchPage):
        self.page = page
        self.calls = 0

    def search(self, keywords, location, page=1, page_size=20):
        self.calls += 1
        return self.page


def _md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def test_analytics_cache_key():
    assert analytics_cache_key("python", "london") == f"analytics_{_md5('python')}_{_md5('london')}"
    assert analytics_cache_key("python", "london", full=True).endswith("_full")
    assert analytics_cache_key("", "") == f"analytics_{_md5('')}_{_md5('')}"


def test_search_cache_key_ignores_param_order():
    a = search_cache_key({"keywords": "python", "page": 1})
    b = search_cache_key({"page": 1, "keywords": "python"})

    assert a == b
    assert a.startswith("jobs_")
    assert a != search_cache_key({"keywords": "python", "page": 2})


def test_put_and_get_json():
    backend = FakeRedis()
    cache = ResultCache(backend)

    cache.put_json("k", {"b": 1, "a": [1, 2]}, 300)

    assert cache.get_json("k") == {"b": 1, "a": [1, 2]}
    assert backend.ttls["k"] == 300
    assert list(json.loads(backend.data["k"])) == ["b", "a"]


def test_get_json_missing_key():
    assert ResultCache(FakeRedis()).get_json("missing") is None


def test_get_json_decodes_bytes():
    backend = FakeRedis()
    backend.data["k"] = b'{"x": 1}'

    assert ResultCache(backend).get_json("k") == {"x": 1}


def test_get_json_discards_unreadable_entry():
    backend = FakeRedis()
    backend.data["k"] = "{broken"

    assert ResultCache(backend).get_json("k") is None
    assert "k" not in backend.data


def test_put_json_rejects_non_positive_ttl():
    with pytest.raises(ValueError, match="ttl_seconds must be positive"):
        ResultCache(FakeRedis()).put_json("k", {}, 0)


def test_forget():
    backend = FakeRedis()
    cache = ResultCache(backend)
    cache.put_json("a", 1, 10)
    cache.put_json("b", 2, 10)

    cache.forget("a", "b")
    cache.forget()

    assert backend.data == {}


def test_cached_source_serves_second_call_from_cache():
    page = SearchPage(total=1, pages=1, jobs=[{"title": "Dev"}], keywords="python", location="leeds")
    inner = CountingSource(page)
    backend = FakeRedis()
    cached = CachedListingSource(inner, ResultCache(backend))

    first = cached.search("python", "leeds")
    second = cached.search("python", "leeds")

    assert inner.calls == 1
    assert first == second == page
    assert list(backend.ttls.values()) == [300]
    assert cached.source_name == "counting"


def test_cached_source_does_not_cache_errors():
    inner = CountingSource(SearchPage.empty("python", "", 1, error="Error fetching jobs. Please try again later."))
    cached = CachedListingSource(inner, ResultCache(FakeRedis()), ttl_seconds=60)

    cached.search("python", "")
    result = cached.search("python", "")

    assert inner.calls == 2
    assert result.error is not None


def test_redis_client_lifecycle():
    client = RedisClient()

    assert client.is_connected is False
    with pytest.raises(RuntimeError, match="not connected"):
        client.client

    connection = client.connect("redis://localhost:6379/15")

    assert client.is_connected is True
    assert client.client is connection
    assert client.connect("redis://other:6379/0") is connection

    client.disconnect()
    assert client.is_connected is False


def test_get_redis_client_is_shared():
    assert get_redis_client() is get_redis_client()
