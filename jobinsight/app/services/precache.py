"""
Analytics pre-caching.

Warms the analytics cache for searches users are likely to run, so the
analytics service can answer them without touching the store.
"""

from jobinsight.app.core.listing_source import ListingSource
from jobinsight.app.services.analytics_service import MarketAnalyticsService
from jobinsight.app.services.fetch_runner import fetch_all_listings
from jobinsight.app.services.job_store import JobStore
from jobinsight.app.tasks.result_cache import ResultCache, analytics_cache_key
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

COMMON_JOB_ROLES = (
    "developer", "software engineer", "web developer", "data scientist",
    "project manager", "product manager", "ux designer", "devops engineer",
    "full stack", "frontend", "backend", "javascript", "python", "java",
)

COMMON_LOCATIONS = (
    "london", "manchester", "birmingham", "leeds", "edinburgh", "glasgow",
    "remote", "bristol", "cambridge", "oxford", "uk",
)

PRECACHE_MAX_PAGES = 10
PRECACHE_PAGE_SIZE = 100
PRECACHE_DELAY_SECONDS = 0.5


def precache_search(
    store: JobStore,
    cache: ResultCache,
    keywords: str,
    location: str,
    days: int = 30,
    source: ListingSource | None = None,
    service: MarketAnalyticsService | None = None,
    delay: float = PRECACHE_DELAY_SECONDS,
) -> dict:
    """
    Refresh, analyze and cache one keyword/location search.

    Failures are logged and reported in the returned dict; they never
    propagate, so one bad search does not end a batch.

    Returns:
        Dict with keywords, location, job_count and cached (plus error on failure)
    """
    outcome = {"keywords": keywords, "location": location, "job_count": 0, "cached": False}
    service = service or MarketAnalyticsService(store, source=source, cache=cache)

    try:
        if source is not None:
            fetch_all_listings(
                source, store, keywords, location,
                max_pages=PRECACHE_MAX_PAGES, page_size=PRECACHE_PAGE_SIZE, delay=delay,
            )

        listings = store.find_listings(keywords, location)
        outcome["job_count"] = len(listings)
        if not listings:
            return outcome

        analytics = service.build_analytics(
            keywords, location, listings, len(listings), pre_cached=True
        )
        cache.put_json(analytics_cache_key(keywords, location), analytics, days * 86400)
        outcome["cached"] = True

        logger.info(
            "Pre-cached analytics: keywords=%r location=%r job_count=%d",
            keywords, location, len(listings),
        )
    except Exception as e:
        logger.error("Error pre-caching analytics for keywords=%r location=%r: %s", keywords, location, e)
        outcome["error"] = str(e)

    return outcome


def precache_common_searches(
    store: JobStore,
    cache: ResultCache,
    days: int = 30,
    source: ListingSource | None = None,
    roles=COMMON_JOB_ROLES,
    locations=COMMON_LOCATIONS,
    delay: float = PRECACHE_DELAY_SECONDS,
) -> list[dict]:
    """Pre-cache every role x location combination."""
    logger.info("Pre-caching %d role/location combinations", len(roles) * len(locations))
    service = MarketAnalyticsService(store, source=source, cache=cache)
    return [
        precache_search(store, cache, role, location, days, source, service, delay)
        for role in roles
        for location in locations
    ]


def precache_popular_searches(
    store: JobStore,
    cache: ResultCache,
    days: int = 30,
    source: ListingSource | None = None,
    title_limit: int = 20,
    location_limit: int = 10,
    delay: float = PRECACHE_DELAY_SECONDS,
) -> list[dict]:
    """Pre-cache the most common stored titles (any location) and stored locations (any keywords)."""
    titles = store.popular_titles(title_limit)
    locations = store.distinct_locations(location_limit)
    logger.info("Found %d unique job titles and %d locations", len(titles), len(locations))

    service = MarketAnalyticsService(store, source=source, cache=cache)
    outcomes = [precache_search(store, cache, title, "", days, source, service, delay) for title in titles]
    outcomes.extend(
        precache_search(store, cache, "", location, days, source, service, delay) for location in locations
    )
    return outcomes
