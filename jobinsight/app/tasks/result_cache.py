"""
Result cache over Redis.

Stores JSON documents under keys derived from search parameters, each with
its own TTL. Used for per-search analytics summaries and for raw search
pages from listing sources.
"""

import hashlib
import json
from typing import Any, Protocol

from jobinsight.app.core.listing_source import ListingSource, SearchPage
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SEARCH_TTL_SECONDS = 300


class KeyValueBackend(Protocol):
    """The subset of the redis.Redis API the cache relies on."""

    def get(self, name: str) -> Any: ...

    def setex(self, name: str, time: int, value: str) -> Any: ...

    def delete(self, *names: str) -> Any: ...


def _md5(value: str) -> str:
    return hashlib.md5((value or "").encode("utf-8")).hexdigest()


def analytics_cache_key(keywords: str, location: str, full: bool = False) -> str:
    """Cache key of the analytics summary for a keyword/location search."""
    return f"analytics_{_md5(keywords)}_{_md5(location)}{'_full' if full else ''}"


def search_cache_key(params: dict) -> str:
    """Cache key of one search page, derived from every request parameter."""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"jobs_{_md5(canonical)}"


class ResultCache:
    """
    JSON result cache with per-entry TTL.

    Args:
        backend: redis.Redis (decode_responses=True) or any object with the
                 same get/setex/delete methods
    """

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    def get_json(self, key: str) -> Any | None:
        """Return the cached document, or None when absent or unreadable."""
        raw = self.backend.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry %s", key)
            self.forget(key)
            return None

    def put_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        """
        Store a JSON-serializable document.

        Raises:
            ValueError: If ttl_seconds is not positive
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        # Key order is preserved; ranked dicts rely on it
        self.backend.setex(key, int(ttl_seconds), json.dumps(value))

    def forget(self, *keys: str) -> None:
        if keys:
            self.backend.delete(*keys)


class CachedListingSource:
    """
    ListingSource wrapper that caches search pages.

    Pages that carry an error are passed through without being cached, so a
    failed request is retried on the next call.
    """

    def __init__(self, source: ListingSource, cache: ResultCache, ttl_seconds: int = DEFAULT_SEARCH_TTL_SECONDS):
        self._source = source
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    @property
    def source_name(self) -> str:
        return self._source.source_name

    def search(
        self, keywords: str, location: str, page: int = 1, page_size: int = 20
    ) -> SearchPage:
        key = search_cache_key(
            {
                "source": self.source_name,
                "keywords": keywords,
                "location": location,
                "page": page,
                "pagesize": page_size,
            }
        )

        cached = self._cache.get_json(key)
        if cached is not None:
            logger.debug("Search cache hit for %s", key)
            return SearchPage.from_dict(cached)

        result = self._source.search(keywords, location, page=page, page_size=page_size)
        if result.error is None:
            self._cache.put_json(key, result.to_dict(), self._ttl_seconds)
        return result
