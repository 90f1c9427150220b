"""
Offline analytics CLI.

Runs the analytics engine over a JSON file of raw listings and prints the
summary as JSON.
"""

import argparse
import json
import sys
from pathlib import Path

from jobinsight.app.core.analytics_engine import analyze
from jobinsight.app.core.file_listing_source import (
    CONTRACT_TYPES,
    FileListingSource,
    format_salary,
    matches_filters,
    matches_search,
)
from jobinsight.app.core.listing_model import ListingRecord


def main(argv=None):
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (for testing)

    Returns:
        Exit code (0=success, 1=error, 2=no matching listings)
    """
    parser = argparse.ArgumentParser(
        description="Compute job market analytics from a JSON file of listings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze every listing in the file
  python -m jobinsight.scripts.analyze --jobs ./listings.json

  # Analyze only listings matching a search
  python -m jobinsight.scripts.analyze \\
    --jobs ./listings.json \\
    --keywords "python developer" \\
    --location london

  # Contract roles paying at least 100k a year, with the matching listings
  python -m jobinsight.scripts.analyze \\
    --jobs ./listings.json \\
    --contract-type contract \\
    --salary-min 100000 \\
    --show-listings
""",
    )

    parser.add_argument(
        "--jobs",
        required=True,
        help="Path to JSON file with raw listings (list or {\"jobs\": [...]})",
    )

    parser.add_argument(
        "--keywords",
        default="",
        help="Only analyze listings whose title or description contains every keyword",
    )

    parser.add_argument(
        "--location",
        default="",
        help="Only analyze listings whose location contains this text",
    )

    parser.add_argument(
        "--salary-min",
        type=float,
        default=None,
        help="Only analyze listings whose annualized salary reaches this amount",
    )

    parser.add_argument(
        "--salary-max",
        type=float,
        default=None,
        help="Only analyze listings whose annualized salary starts at or below this amount",
    )

    parser.add_argument(
        "--contract-type",
        choices=CONTRACT_TYPES,
        default="all",
        help="Only analyze permanent or contract listings (default: all)",
    )

    parser.add_argument(
        "--show-listings",
        action="store_true",
        help="Include the matching listings, with formatted salaries, in the output",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used to classify listings in parallel (default: sequential)",
    )

    args = parser.parse_args(argv)

    try:
        jobs_file = Path(args.jobs)
        if not jobs_file.exists():
            result = {
                "status": "error",
                "error": f"Jobs file not found: {args.jobs}",
            }
            print(json.dumps(result, indent=2, sort_keys=True))
            return 1

        source = FileListingSource("file", str(jobs_file))
        listings = [
            ListingRecord.from_raw(job) for job in source.load_raw_jobs()
            if isinstance(job, dict) and matches_search(job, args.keywords, args.location)
        ]
        listings = [
            listing for listing in listings
            if matches_filters(listing, args.salary_min, args.salary_max, args.contract_type)
        ]

        search_params = {"keywords": args.keywords, "location": args.location}
        filters = {
            "salary_min": args.salary_min,
            "salary_max": args.salary_max,
            "contract_type": args.contract_type,
        }
        if not listings:
            result = {
                "status": "no_jobs",
                "error": "No jobs found matching your criteria. Try a different search.",
                "jobs_file": str(jobs_file.absolute()),
                "search_params": search_params,
                "filters": filters,
            }
            print(json.dumps(result, indent=2, sort_keys=True))
            return 2

        summary = analyze(listings, max_workers=args.workers)

        result = {
            "status": "success",
            "jobs_file": str(jobs_file.absolute()),
            "search_params": search_params,
            "filters": filters,
            "analytics": summary.to_dict(),
        }
        if args.show_listings:
            result["listings"] = [
                {**listing.to_dict(), "formatted_salary": format_salary(listing)}
                for listing in listings
            ]
        # Unsorted: companies and skills are ranked maps
        print(json.dumps(result, indent=2))
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
