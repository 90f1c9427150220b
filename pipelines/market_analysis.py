"""
Market Analysis Pipeline

Collects listings for one search from a set of listing sources and turns
them into a job market analytics summary.
"""

# Pipeline: Market Analysis
# Purpose: Summarize the job market (salaries, companies, skills, seniority,
#          posting volume) for a keyword/location search
#
# Steps:
#   1. collect_listings
#      - Input: Keywords, location, listing sources
#      - Output: Deduplicated ListingRecord instances plus per-listing errors
#      - Failure: Record the error, continue with the next listing or source
#
#   2. analyze_listings
#      - Input: Listings from step 1
#      - Output: AnalyticsSummary
#
# Storage and caching are not part of this pipeline; see
# services/fetch_runner.py and services/analytics_service.py.


def run_market_analysis(
    keywords: str = "",
    location: str = "",
    sources: list = None,
    pages: int = 1,
    page_size: int = 100,
    max_workers: int = None,
) -> dict:
    """
    Execute the market analysis pipeline for one search.

    All I/O is delegated to the provided ListingSource implementations.

    Args:
        keywords: Search keywords
        location: Search location
        sources: List of ListingSource implementations to collect from
        pages: Pages to request from each source
        page_size: Listings per page
        max_workers: Thread count for per-listing classification (optional)

    Returns:
        Dict containing:
        - status: "ok" (collection errors are reported separately)
        - query: The keywords/location searched
        - counts: Dict with "listings" and "errors" counts
        - errors: List of error dicts from collection
        - analytics: AnalyticsSummary.to_dict() for the collected listings

    Example:
        >>> from jobinsight.app.core.file_listing_source import FileListingSource
        >>> source = FileListingSource("fixtures", "listings.json")
        >>> result = run_market_analysis("python", "london", [source])
        >>> result["analytics"]["total_jobs"]
    """
    from jobinsight.app.core.analytics_engine import analyze
    from jobinsight.app.core.listing_aggregator import ListingAggregator

    query = {"keywords": keywords or "", "location": location or ""}

    # Step 1: Collect listings with error handling
    aggregator = ListingAggregator(sources or [])
    listings, errors = aggregator.collect_with_errors(
        query["keywords"], query["location"], pages=pages, page_size=page_size
    )

    # Step 2: Analyze
    summary = analyze(listings, max_workers=max_workers)

    return {
        "status": "ok",
        "query": query,
        "counts": {
            "listings": len(listings),
            "errors": len(errors),
        },
        "errors": errors,
        "analytics": summary.to_dict(),
    }
