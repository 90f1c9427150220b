"""
File-based listing source implementation.

Adapter for local fixtures and exports. Reads raw listings from JSON files
for testing, development, and offline analysis.

This is a deterministic, filesystem-based implementation of the
ListingSource protocol with no network dependencies.
"""

import json
import math
from pathlib import Path

from jobinsight.app.core.classifier import is_contract_role
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.listing_source import NO_RESULTS_ERROR, SearchPage
from jobinsight.app.core.salary_normalizer import normalize_salary

CONTRACT_TYPES = ("all", "permanent", "contract")

NO_SALARY_TEXT = "Salary not specified"
CURRENCY_SYMBOLS = {"GBP": "£", "EUR": "€"}
PERIOD_LABELS = {"Y": "year", "M": "month", "D": "day", "H": "hour"}


class FileListingSource:
    """
    File-based listing source for local fixtures and exports.

    Reads raw listings from JSON files. Supports two formats:
    1. Direct list: [{"title": "...", ...}, ...]
    2. Object wrapper: {"jobs": [{"title": "...", ...}, ...]}

    Searches filter the file contents the same way stored listings are
    filtered: every keyword longer than two characters must appear in the
    title or description, and the location must appear in the listing
    location.

    Attributes:
        source_name: Identifier for this source (e.g., "fixtures")
        path: Path to JSON file containing listings
    """

    def __init__(self, source_name: str, path: str):
        """
        Initialize file-based listing source.

        Args:
            source_name: Unique identifier for this source
            path: Path to JSON file containing listings
        """
        self._source_name = source_name
        self._path = Path(path)

    @property
    def source_name(self) -> str:
        return self._source_name

    def load_raw_jobs(self) -> list[dict]:
        """
        Read every raw listing from the JSON file.

        Returns:
            List of raw listing dicts

        Raises:
            FileNotFoundError: If JSON file does not exist
            ValueError: If file contains invalid JSON or wrong structure
        """
        if not self._path.exists():
            raise FileNotFoundError(f"Listing data file not found: {self._path}")

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in listing data file {self._path}: {str(e)}")

        # Handle two formats: list or {"jobs": [...]}
        if isinstance(data, list):
            jobs = data
        elif isinstance(data, dict) and "jobs" in data:
            jobs = data["jobs"]
            if not isinstance(jobs, list):
                raise ValueError(
                    f"Expected 'jobs' key to contain a list, got {type(jobs).__name__}"
                )
        else:
            raise ValueError(
                f"Expected JSON to be a list or object with 'jobs' key, "
                f"got {type(data).__name__}"
            )

        return jobs

    def search(
        self, keywords: str, location: str, page: int = 1, page_size: int = 20
    ) -> SearchPage:
        """
        Search the file contents.

        Args:
            keywords: Keywords to filter on (may be empty)
            location: Location substring to filter on (may be empty)
            page: 1-based page number
            page_size: Listings per page

        Returns:
            SearchPage with error "No results found" when nothing matches
        """
        page = max(1, int(page))
        page_size = max(1, int(page_size))

        matches = [
            job for job in self.load_raw_jobs()
            if isinstance(job, dict) and matches_search(job, keywords, location)
        ]

        if not matches:
            return SearchPage.empty(keywords, location, page, error=NO_RESULTS_ERROR)

        start = (page - 1) * page_size
        return SearchPage(
            total=len(matches),
            pages=math.ceil(len(matches) / page_size),
            jobs=matches[start:start + page_size],
            current_page=page,
            keywords=keywords,
            location=location,
        )


def search_terms(keywords: str | None) -> list[str]:
    """Split keywords into search terms, dropping words of two characters or fewer."""
    return [word for word in (keywords or "").split() if len(word.strip()) > 2]


def matches_search(raw: dict, keywords: str | None, location: str | None) -> bool:
    """Check a raw listing against keyword and location filters (case-insensitive)."""
    text = f"{raw.get('title') or ''} {raw.get('description') or ''}".lower()
    for term in search_terms(keywords):
        if term.lower() not in text:
            return False

    if location:
        listing_location = str(raw.get("locations") or raw.get("location") or "").lower()
        if location.lower() not in listing_location:
            return False

    return True


def matches_filters(
    listing: ListingRecord,
    salary_min: float | None = None,
    salary_max: float | None = None,
    contract_type: str | None = None,
) -> bool:
    """
    Check a listing against local salary and contract-type filters.

    Salary bounds are compared with the annualized range in the reference
    currency, so a day rate of £400 passes salary_min=100000. Listings
    without salary data never pass a salary filter.

    Args:
        listing: ListingRecord to check
        salary_min: Lowest acceptable annual salary (range overlap)
        salary_max: Highest acceptable annual salary (range overlap)
        contract_type: "permanent", "contract", "all" or None

    Returns:
        True if the listing passes every filter that is set

    Raises:
        ValueError: If contract_type is not a known value
    """
    if contract_type and contract_type != "all":
        if contract_type not in CONTRACT_TYPES:
            raise ValueError(
                f"contract_type must be one of {', '.join(CONTRACT_TYPES)}, got {contract_type!r}"
            )
        mode = "contract" if is_contract_role(listing) else "permanent"
        if mode != contract_type:
            return False

    if salary_min or salary_max:
        salary = normalize_salary(listing)
        if salary is None:
            return False
        if salary_min and salary.max_annual < salary_min:
            return False
        if salary_max and salary.min_annual > salary_max:
            return False

    return True


def format_salary(listing: ListingRecord) -> str:
    """Render structured pay as e.g. "£450-550 per day"; free text is not rendered."""
    if listing.salary_min is None or not listing.salary_period:
        return NO_SALARY_TEXT

    label = PERIOD_LABELS.get(listing.salary_period.upper())
    if label is None:
        return NO_SALARY_TEXT

    currency = (listing.salary_currency or "GBP").upper()
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    high = listing.salary_max if listing.salary_max is not None else listing.salary_min

    return f"{symbol}{listing.salary_min:,.0f}-{high:,.0f} per {label}"
