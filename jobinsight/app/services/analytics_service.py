"""
Market analytics service.

Answers "what does the market look like for these keywords in this
location" from stored listings, with a per-search result cache in front.
"""

from datetime import datetime
from typing import Callable

from jobinsight.app.core.analytics_engine import AnalyticsSummary, analyze
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.listing_source import ListingSource
from jobinsight.app.services.job_store import JobStore
from jobinsight.app.tasks.result_cache import ResultCache, analytics_cache_key
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_SEARCH_MESSAGE = "Please perform a search to see job market analytics."
NO_MATCHES_MESSAGE = "No jobs found matching your criteria. Try a different search."

REFRESH_PAGE_SIZE = 100

# Stored share of the API hit count above which an analysis counts as complete
COMPLETE_ANALYSIS_RATIO = 0.9


def empty_analytics(error: str, keywords: str = "", location: str = "") -> dict:
    """Analytics payload for searches that produced nothing to analyze."""
    payload = AnalyticsSummary().to_dict()
    payload.update(
        {
            "error": error,
            "total_results": 0,
            "search_params": {"keywords": keywords, "location": location},
        }
    )
    return payload


class MarketAnalyticsService:
    """
    Analytics over stored listings for a keyword/location search.

    Collaborators:
    - store: JobStore holding the listings (required)
    - source: ListingSource used for refreshes and API hit counts (optional)
    - cache: ResultCache for finished analytics payloads (optional)
    """

    def __init__(
        self,
        store: JobStore,
        source: ListingSource | None = None,
        cache: ResultCache | None = None,
        cache_hours: int = 24,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.source = source
        self.cache = cache
        self.cache_hours = cache_hours
        self._now = now

    def analytics_for_search(
        self,
        keywords: str = "",
        location: str = "",
        full_analysis: bool = False,
        refresh: bool = False,
    ) -> dict:
        """
        Build (or fetch from cache) the analytics payload for a search.

        Args:
            keywords: Search keywords
            location: Search location
            full_analysis: Mark the analysis as comprehensive (separate cache entry)
            refresh: Fetch one fresh page from the source and bypass the cache

        Returns:
            Analytics dict: the AnalyticsSummary fields plus total_results,
            search_params and meta. Failures are reported through an "error"
            key on an otherwise empty payload.
        """
        keywords = (keywords or "").strip()
        location = (location or "").strip()

        try:
            if refresh:
                self.refresh_listings(keywords, location)

            cache_key = analytics_cache_key(keywords, location, full_analysis)
            if not refresh and self.cache is not None:
                cached = self.cache.get_json(cache_key)
                if cached is not None:
                    logger.debug("Returning cached analytics for %s", cache_key)
                    return cached

            if not keywords and not location:
                return empty_analytics(EMPTY_SEARCH_MESSAGE, keywords, location)

            listings = self.store.find_listings(keywords, location)
            if not listings:
                return empty_analytics(NO_MATCHES_MESSAGE, keywords, location)

            api_count = self.api_job_count(keywords, location)
            analytics = self.build_analytics(
                keywords, location, listings, api_count, full_analysis=full_analysis
            )

            if self.cache is not None:
                self.cache.put_json(cache_key, analytics, self.cache_hours * 3600)

            return analytics

        except Exception as e:
            logger.error("Analytics error for keywords=%r location=%r: %s", keywords, location, e)
            return empty_analytics(
                f"An error occurred while analyzing the data: {e}", keywords, location
            )

    def build_analytics(
        self,
        keywords: str,
        location: str,
        listings: list[ListingRecord],
        api_count: int,
        full_analysis: bool = False,
        pre_cached: bool = False,
    ) -> dict:
        """Run the engine and attach search parameters and run metadata."""
        job_count = len(listings)
        total_available = api_count or job_count

        analytics = analyze(listings).to_dict()
        analytics["total_results"] = total_available
        analytics["search_params"] = {
            "keywords": keywords,
            "location": location,
            "full_analysis": full_analysis,
        }

        meta = {
            "jobs_analyzed": job_count,
            "total_available": total_available,
            "analysis_date": self._now().strftime("%Y-%m-%d %H:%M:%S"),
        }
        if pre_cached:
            meta["pre_cached"] = True
        else:
            meta["complete_analysis"] = (
                full_analysis or job_count >= api_count * COMPLETE_ANALYSIS_RATIO
            )
            meta["note"] = (
                "Comprehensive job market analysis"
                if full_analysis
                else "Analysis based on currently available data"
            )
        analytics["meta"] = meta

        return analytics

    def refresh_listings(self, keywords: str, location: str) -> int:
        """
        Fetch one page from the source and store it.

        Returns:
            Number of listings stored (0 without a source or on failure)
        """
        if self.source is None:
            return 0

        logger.info("Fetching one page for quick refresh")
        page = self.source.search(keywords, location, page=1, page_size=REFRESH_PAGE_SIZE)
        if page.error:
            logger.error("Error in quick refresh: %s", page.error)
            return 0

        result = self.store.upsert_listings(ListingRecord.from_raw(raw) for raw in page.jobs)
        logger.info("Fetched quick refresh page: job_count=%d stored=%d", len(page.jobs), result.stored)
        return result.stored

    def api_job_count(self, keywords: str, location: str) -> int:
        """Total hit count reported by the source, or 0 when unavailable."""
        if self.source is None:
            return 0

        page = self.source.search(keywords, location, page=1, page_size=1)
        if page.error:
            return 0
        return page.total
