"""
Bulk fetch CLI.

Fetches every page of a Careerjet search into the listing store.

Usage:
    python -m jobinsight.scripts.fetch_all --keywords "python developer" --location london
"""

import argparse
import json
import sys

from jobinsight.app.config import Settings
from jobinsight.app.services.careerjet_client import CareerjetClient
from jobinsight.app.services.fetch_runner import fetch_all_listings
from jobinsight.app.services.job_store import JobStore, create_session_factory
from jobinsight.app.tasks import ResultCache, analytics_cache_key, get_redis_client


def main(argv=None):
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (for testing)

    Returns:
        Exit code (0=success, 1=error)
    """
    parser = argparse.ArgumentParser(
        description="Fetch all jobs matching a search from the Careerjet API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch up to 100 pages of 100 listings
  python -m jobinsight.scripts.fetch_all --keywords developer --location london

  # Fetch quickly and drop the cached analytics for the search
  python -m jobinsight.scripts.fetch_all \\
    --keywords "data scientist" \\
    --max-pages 5 \\
    --delay 0 \\
    --clear-cache

Environment:
  CAREERJET_AFFID (required), DATABASE_URL, REDIS_URL, CAREERJET_LOCALE
""",
    )

    parser.add_argument("--keywords", default="", help="Keywords to search for")
    parser.add_argument("--location", default="", help="Location to search in")
    parser.add_argument(
        "--max-pages", type=int, default=100, help="Maximum number of pages to fetch (default: 100)"
    )
    parser.add_argument(
        "--page-size", type=int, default=100, help="Number of jobs per page (default: 100)"
    )
    parser.add_argument(
        "--delay", type=float, default=1.0, help="Delay between API requests in seconds (default: 1)"
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Clear the cached analytics for this search after fetching",
    )

    args = parser.parse_args(argv)

    try:
        if not args.keywords.strip() and not args.location.strip():
            result = {
                "status": "error",
                "error": "You must specify at least keywords or location",
            }
            print(json.dumps(result, indent=2, sort_keys=True))
            return 1

        settings = Settings.from_env()
        client = CareerjetClient(
            affid=settings.careerjet_affid,
            locale=settings.careerjet_locale,
            base_url=settings.careerjet_api_url,
            timeout_s=settings.http_timeout_seconds,
        )

        session_factory = create_session_factory(settings.database_url)
        with session_factory() as session:
            report = fetch_all_listings(
                client,
                JobStore(session),
                args.keywords,
                args.location,
                max_pages=args.max_pages,
                page_size=args.page_size,
                delay=args.delay,
            )

        result = {"status": "success", **report.to_dict(), "cache_cleared": False}

        if args.clear_cache:
            _clear_analytics_cache(settings, report.keywords, report.location)
            result["cache_cleared"] = True

        print(json.dumps(result, indent=2, sort_keys=True))
        return 0

    except Exception as e:
        result = {
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }
        print(json.dumps(result, indent=2, sort_keys=True))
        return 1


def _clear_analytics_cache(settings: Settings, keywords: str, location: str) -> None:
    cache = ResultCache(get_redis_client().connect(settings.redis_url))
    cache.forget(
        analytics_cache_key(keywords, location),
        analytics_cache_key(keywords, location, full=True),
    )


if __name__ == "__main__":
    sys.exit(main())
