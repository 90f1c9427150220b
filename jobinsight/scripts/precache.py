"""
Analytics pre-caching CLI.

Warms the analytics cache for an explicit search, for common role/location
combinations, or (by default) for the most common stored titles and
locations.
"""

import argparse
import json
import sys

from jobinsight.app.config import Settings
from jobinsight.app.services.careerjet_client import CareerjetClient
from jobinsight.app.services.job_store import JobStore, create_session_factory
from jobinsight.app.services.precache import (
    precache_common_searches,
    precache_popular_searches,
    precache_search,
)
from jobinsight.app.tasks import ResultCache, get_redis_client


def main(argv=None):
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (for testing)

    Returns:
        Exit code (0=success, 1=error)
    """
    parser = argparse.ArgumentParser(
        description="Pre-cache job analytics to improve response times",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Popular stored titles and locations
  python -m jobinsight.scripts.precache

  # Every common role in every common location, kept for a week
  python -m jobinsight.scripts.precache --common-searches --days 7

  # One search
  python -m jobinsight.scripts.precache --keywords developer --location leeds
""",
    )

    parser.add_argument(
        "--common-searches",
        action="store_true",
        help="Pre-cache common job role and location combinations",
    )
    parser.add_argument("--keywords", default="", help="Specific keywords to cache")
    parser.add_argument("--location", default="", help="Specific location to cache")
    parser.add_argument(
        "--days", type=int, default=30, help="Number of days to keep cached data (default: 30)"
    )
    parser.add_argument(
        "--no-fetch",
        action="store_true",
        help="Analyze stored listings only, without refreshing from the API",
    )

    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
        source = None
        if not args.no_fetch:
            source = CareerjetClient(
                affid=settings.careerjet_affid,
                locale=settings.careerjet_locale,
                base_url=settings.careerjet_api_url,
                timeout_s=settings.http_timeout_seconds,
            )

        cache = ResultCache(get_redis_client().connect(settings.redis_url))
        session_factory = create_session_factory(settings.database_url)

        with session_factory() as session:
            store = JobStore(session)
            if args.keywords and args.location:
                mode = "search"
                outcomes = [
                    precache_search(store, cache, args.keywords, args.location, args.days, source)
                ]
            elif args.common_searches:
                mode = "common"
                outcomes = precache_common_searches(store, cache, args.days, source)
            else:
                mode = "popular"
                outcomes = precache_popular_searches(store, cache, args.days, source)

        result = {
            "status": "success",
            "mode": mode,
            "days": args.days,
            "searches": len(outcomes),
            "cached": sum(1 for o in outcomes if o["cached"]),
            "failed": sum(1 for o in outcomes if "error" in o),
            "results": outcomes,
        }
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


if __name__ == "__main__":
    sys.exit(main())
