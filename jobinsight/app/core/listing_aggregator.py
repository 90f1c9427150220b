"""
Listing aggregator for multi-source collection.

Fetches pages from multiple listing sources, normalizes raw dicts into
canonical ListingRecord instances, and deduplicates across sources.

Deduplication strategy:
- Listings with a URL are deduplicated by URL
- Listings without a URL fall back to ListingRecord.fingerprint()
- Keeps first occurrence; preserves source, page, and within-page order
"""

from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.listing_source import ListingSource


class ListingAggregator:
    """
    Aggregates listings from multiple sources with deduplication.

    Ordering:
    - Sources are processed in the order provided to __init__
    - Pages are fetched in ascending order; a page without jobs ends a source
    - Duplicate listings are skipped silently

    Error handling:
    - collect() raises ValueError for invalid source responses
    - collect_with_errors() captures errors per-source and per-job and continues
    """

    def __init__(self, sources: list[ListingSource]):
        """
        Initialize aggregator with listing sources.

        Args:
            sources: List of ListingSource implementations to aggregate from
        """
        self.sources = sources

    def collect(
        self, keywords: str, location: str, pages: int = 1, page_size: int = 100
    ) -> list[ListingRecord]:
        """
        Collect listings from all sources with deduplication.

        Args:
            keywords: Search keywords
            location: Search location
            pages: Maximum number of pages to read per source
            page_size: Listings per page

        Returns:
            List of deduplicated ListingRecord instances

        Raises:
            ValueError: If a source returns non-list jobs or non-dict entries
        """
        seen = set()
        listings = []

        for source in self.sources:
            for raw_jobs in self._iter_pages(source, keywords, location, pages, page_size):
                if not isinstance(raw_jobs, list):
                    raise ValueError(
                        f"Source '{source.source_name}' returned non-list: "
                        f"{type(raw_jobs).__name__}"
                    )

                for raw in raw_jobs:
                    if not isinstance(raw, dict):
                        raise ValueError(
                            f"Source '{source.source_name}' returned non-dict entry: "
                            f"{type(raw).__name__}"
                        )

                    listing = ListingRecord.from_raw(raw)
                    key = _dedup_key(listing)
                    if key not in seen:
                        seen.add(key)
                        listings.append(listing)

        return listings

    def collect_with_errors(
        self, keywords: str, location: str, pages: int = 1, page_size: int = 100
    ) -> tuple[list[ListingRecord], list[dict]]:
        """
        Collect listings from all sources, capturing errors instead of raising.

        Returns:
            Tuple of (listings, errors):
            - listings: List of successfully normalized ListingRecord instances
            - errors: List of error dicts, each containing:
                - source: str (source_name where error occurred)
                - index: int | None (index of failing job on its page, or None for fetch errors)
                - error: str (error message)
                - raw_excerpt: str | None (first ~200 chars of raw job, or None)
        """
        seen = set()
        listings = []
        errors = []

        for source in self.sources:
            try:
                for raw_jobs in self._iter_pages(source, keywords, location, pages, page_size):
                    if not isinstance(raw_jobs, list):
                        raise ValueError(f"Returned non-list: {type(raw_jobs).__name__}")

                    for idx, raw in enumerate(raw_jobs):
                        try:
                            if not isinstance(raw, dict):
                                raise ValueError(f"Entry is not a dict: {type(raw).__name__}")

                            listing = ListingRecord.from_raw(raw)
                            key = _dedup_key(listing)
                            if key not in seen:
                                seen.add(key)
                                listings.append(listing)

                        except Exception as e:
                            errors.append(
                                {
                                    "source": source.source_name,
                                    "index": idx,
                                    "error": str(e),
                                    "raw_excerpt": str(raw)[:200],
                                }
                            )
            except Exception as e:
                errors.append(
                    {
                        "source": source.source_name,
                        "index": None,
                        "error": str(e),
                        "raw_excerpt": None,
                    }
                )

        return listings, errors

    @staticmethod
    def _iter_pages(source: ListingSource, keywords: str, location: str, pages: int, page_size: int):
        """Yield the raw job lists of consecutive pages until one comes back empty."""
        for page_number in range(1, max(pages, 1) + 1):
            page = source.search(keywords, location, page=page_number, page_size=page_size)
            if not page.jobs:
                return
            yield page.jobs
            if page.pages and page_number >= page.pages:
                return


def _dedup_key(listing: ListingRecord) -> str:
    if listing.url:
        return f"url:{listing.url}"
    return f"fp:{listing.fingerprint()}"
