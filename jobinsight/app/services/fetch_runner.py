"""
Bulk listing fetch.

Walks every result page of a search (up to a page limit) and stores what it
finds, pacing requests and giving up after repeated failures.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Callable

from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.listing_source import NO_RESULTS_ERROR, ListingSource
from jobinsight.app.services.job_store import JobStore
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

MAX_CONSECUTIVE_ERRORS = 3


@dataclass
class FetchReport:
    """Outcome of a bulk fetch run."""

    keywords: str
    location: str
    total_available: int = 0
    pages_planned: int = 0
    pages_fetched: int = 0
    jobs_processed: int = 0
    new_jobs: int = 0
    stored_count: int = 0
    errors: list[dict] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def percent_complete(self) -> float:
        if self.total_available <= 0:
            return 0.0
        return round(self.stored_count / self.total_available * 100, 2)

    def to_dict(self) -> dict:
        return {
            "keywords": self.keywords,
            "location": self.location,
            "total_available": self.total_available,
            "pages_planned": self.pages_planned,
            "pages_fetched": self.pages_fetched,
            "jobs_processed": self.jobs_processed,
            "new_jobs": self.new_jobs,
            "stored_count": self.stored_count,
            "percent_complete": self.percent_complete,
            "errors": [dict(e) for e in self.errors],
            "stopped_early": self.stopped_early,
        }


def fetch_all_listings(
    source: ListingSource,
    store: JobStore,
    keywords: str = "",
    location: str = "",
    max_pages: int = 100,
    page_size: int = 100,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchReport:
    """
    Fetch every page of a search and store the listings.

    A size-1 probe request reads the hit count first; the run then covers
    min(total pages, max_pages) pages. It stops on the first empty page and
    after MAX_CONSECUTIVE_ERRORS failed pages in a row.

    Args:
        source: Listing source to page through
        store: Store receiving the listings
        keywords: Search keywords
        location: Search location
        max_pages: Upper bound on pages requested
        page_size: Listings per page
        delay: Seconds to wait between page requests (doubled after a failure)
        sleep: Sleep function (injectable for tests)

    Returns:
        FetchReport

    Raises:
        ValueError: If neither keywords nor location is given
    """
    keywords = (keywords or "").strip()
    location = (location or "").strip()
    if not keywords and not location:
        raise ValueError("You must specify at least keywords or location")

    report = FetchReport(keywords=keywords, location=location)

    probe = source.search(keywords, location, page=1, page_size=1)
    report.total_available = probe.total
    if probe.total == 0:
        logger.warning(
            "No jobs found for keywords=%r location=%r", keywords or "any keyword", location or "any location"
        )
        report.stored_count = store.count_listings(keywords, location)
        return report

    report.pages_planned = min(math.ceil(probe.total / page_size), max_pages)
    existing = store.count_listings(keywords, location)
    logger.info(
        "Found %d total jobs, fetching %d pages (%d per page); %d already stored",
        probe.total, report.pages_planned, page_size, existing,
    )

    consecutive_errors = 0
    for page_number in range(1, report.pages_planned + 1):
        logger.info("Fetching page %d of %d", page_number, report.pages_planned)
        page = source.search(keywords, location, page=page_number, page_size=page_size)

        if page.error and page.error != NO_RESULTS_ERROR:
            consecutive_errors += 1
            report.errors.append({"page": page_number, "error": page.error})
            logger.error("Error on page %d: %s", page_number, page.error)
            if consecutive_errors >= MAX_CONSECUTIVE_ERRORS:
                logger.error("Too many consecutive errors. Stopping.")
                report.stopped_early = True
                break
            if delay > 0:
                sleep(delay * 2)
            continue

        if not page.jobs:
            logger.warning("No jobs returned for page %d. Stopping.", page_number)
            report.stopped_early = page_number < report.pages_planned
            break

        consecutive_errors = 0
        result = store.upsert_listings(ListingRecord.from_raw(raw) for raw in page.jobs)
        for error in result.errors:
            report.errors.append({"page": page_number, **error})

        stored_now = store.count_listings(keywords, location)
        report.pages_fetched += 1
        report.jobs_processed += len(page.jobs)
        report.new_jobs += stored_now - existing
        logger.info(
            "Page %d: processed %d jobs (%d new)", page_number, len(page.jobs), stored_now - existing
        )
        existing = stored_now

        if page_number < report.pages_planned and delay > 0:
            sleep(delay)

    report.stored_count = store.count_listings(keywords, location)
    logger.info(
        "Completed fetch: processed=%d new=%d stored=%d/%d (%.2f%% complete)",
        report.jobs_processed, report.new_jobs, report.stored_count,
        report.total_available, report.percent_complete,
    )
    return report
