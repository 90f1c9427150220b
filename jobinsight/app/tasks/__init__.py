"""
Caching infrastructure package.

Redis connection management and the TTL result cache built on it.
"""

from .redis_client import get_redis_client
from .result_cache import CachedListingSource, ResultCache, analytics_cache_key

__all__ = ["get_redis_client", "CachedListingSource", "ResultCache", "analytics_cache_key"]
