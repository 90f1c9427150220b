"""
Job market analytics engine.

Folds a collection of listings into an AnalyticsSummary: salary ranges and
statistics per employment mode, a company leaderboard, a skill histogram,
experience-level counts, and a monthly timeline.

Deterministic and pure:
- No network calls
- No database access
- No filesystem operations
- Identical input (same records, same order) gives identical output

Ordering:
- Listings are folded in input order
- Ties in rankings keep first-seen order
"""

import statistics
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Iterable

from jobinsight.app.core.classifier import EXPERIENCE_TIERS, Classification, classify
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.salary_normalizer import (
    NormalizedSalary,
    annualized_minimum,
    normalize_salary,
)
from jobinsight.app.core.skill_extractor import extract_skills
from jobinsight.app.core.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

EMPLOYMENT_MODES = ("permanent", "contract")

SALARY_RANGE_LIMIT = 10
COMPANY_TRACK_LIMIT = 50
TOP_COMPANIES = 10
TOP_SKILLS = 15
TIMELINE_MONTHS = 24
CHUNK_SIZE = 500


@dataclass(frozen=True)
class ListingFacts:
    """Per-listing results of the normalizer, classifier and skill extractor."""

    listing: ListingRecord
    salary: NormalizedSalary | None
    classification: Classification
    skills: list[str]


@dataclass(frozen=True)
class SalaryRangeEntry:
    """Display entry of the salary_ranges lists."""

    min: float
    max: float
    avg: float
    company: str

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max, "avg": self.avg, "company": self.company}


@dataclass(frozen=True)
class SalaryStatistics:
    """Distribution of annualized averages for one employment mode."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0
    count: int = 0

    @classmethod
    def from_values(cls, values: list[float]) -> "SalaryStatistics":
        """
        Compute statistics over annualized averages.

        The median is the middle element of the sorted values, or the mean
        of the two middle elements when the count is even. An empty list
        gives all zeros.
        """
        if not values:
            return cls()
        return cls(
            min=min(values),
            max=max(values),
            avg=sum(values) / len(values),
            median=statistics.median(values),
            count=len(values),
        )

    def to_dict(self) -> dict:
        return {
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
            "median": self.median,
            "count": self.count,
        }


@dataclass(frozen=True)
class CompanyStats:
    count: int
    avg_salary: float

    def to_dict(self) -> dict:
        return {"count": self.count, "avg_salary": self.avg_salary}


@dataclass(frozen=True)
class TimelinePoint:
    """Posting count and average annualized salary for one month (YYYY-MM)."""

    month: str
    count: int
    avg_salary: float

    def to_dict(self) -> dict:
        return {"month": self.month, "count": self.count, "avg_salary": self.avg_salary}


@dataclass
class AnalyticsSummary:
    """
    Result of one analytics run.

    Produced fresh from each input collection and owned by the caller.
    """

    total_jobs: int = 0
    salary_ranges: dict[str, list[SalaryRangeEntry]] = field(
        default_factory=lambda: {mode: [] for mode in EMPLOYMENT_MODES}
    )
    salary_statistics: dict[str, SalaryStatistics] = field(
        default_factory=lambda: {mode: SalaryStatistics() for mode in EMPLOYMENT_MODES}
    )
    companies: dict[str, CompanyStats] = field(default_factory=dict)
    skills: dict[str, int] = field(default_factory=dict)
    experience_levels: dict[str, int] = field(
        default_factory=lambda: {tier: 0 for tier in EXPERIENCE_TIERS}
    )
    timeline: list[TimelinePoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "total_jobs": self.total_jobs,
            "salary_ranges": {
                mode: [entry.to_dict() for entry in entries]
                for mode, entries in self.salary_ranges.items()
            },
            "salary_statistics": {
                mode: stats.to_dict() for mode, stats in self.salary_statistics.items()
            },
            "companies": {name: stats.to_dict() for name, stats in self.companies.items()},
            "skills": dict(self.skills),
            "experience_levels": dict(self.experience_levels),
            "timeline": [point.to_dict() for point in self.timeline],
        }


@dataclass
class _MonthTotals:
    count: int = 0
    salary_total: float = 0.0
    with_salary: int = 0


@dataclass
class _CompanyTotals:
    count: int = 0
    salary_total: float = 0.0


class AnalyticsAccumulator:
    """
    Running totals of a single analytics run.

    Display ranges are capped at insertion and company tracking stops
    accepting new companies after COMPANY_TRACK_LIMIT, so the fold order
    matters. Per-mode statistics cover every salaried listing.
    """

    def __init__(self):
        self.total_jobs = 0
        self.mode_averages: dict[str, list[float]] = {mode: [] for mode in EMPLOYMENT_MODES}
        self.mode_ranges: dict[str, list[SalaryRangeEntry]] = {mode: [] for mode in EMPLOYMENT_MODES}
        self.companies: dict[str, _CompanyTotals] = {}
        self.skill_counts: dict[str, int] = {}
        self.experience_levels: dict[str, int] = {tier: 0 for tier in EXPERIENCE_TIERS}
        self.months: dict[str, _MonthTotals] = {}

    def add(self, facts: ListingFacts) -> None:
        """Fold one listing into the running totals."""
        self.total_jobs += 1

        listing = facts.listing
        salary = facts.salary
        mode = facts.classification.employment_mode
        company = listing.display_company

        if salary is not None:
            self.mode_averages[mode].append(salary.avg_annual)

            if len(self.mode_ranges[mode]) < SALARY_RANGE_LIMIT:
                self.mode_ranges[mode].append(
                    SalaryRangeEntry(
                        min=salary.min_annual,
                        max=salary.max_annual,
                        avg=salary.avg_annual,
                        company=company,
                    )
                )

            totals = self.companies.get(company)
            if totals is None and len(self.companies) < COMPANY_TRACK_LIMIT:
                totals = self.companies[company] = _CompanyTotals()
            if totals is not None:
                totals.count += 1
                totals.salary_total += salary.avg_annual

        for skill in facts.skills:
            self.skill_counts[skill] = self.skill_counts.get(skill, 0) + 1

        self.experience_levels[facts.classification.experience_tier] += 1

        self.record_month(listing)

    def record_month(self, listing: ListingRecord) -> None:
        """
        Count a listing in its posting month. Undated listings are skipped.

        The month salary is the annualized salary_min; free-text salaries
        are counted but do not contribute to the month average.
        """
        if listing.posting_date is None:
            return
        month = self.months.setdefault(listing.posting_date.strftime("%Y-%m"), _MonthTotals())
        month.count += 1
        salary = annualized_minimum(listing)
        if salary:
            month.salary_total += salary
            month.with_salary += 1

    def timeline(self) -> list[TimelinePoint]:
        """Chronological timeline of the most recent TIMELINE_MONTHS months."""
        points = []
        for month in sorted(self.months)[-TIMELINE_MONTHS:]:
            totals = self.months[month]
            avg_salary = totals.salary_total / totals.with_salary if totals.with_salary else 0
            points.append(TimelinePoint(month=month, count=totals.count, avg_salary=avg_salary))
        return points

    def finalize(self) -> AnalyticsSummary:
        """Turn the running totals into an AnalyticsSummary."""
        companies = {
            name: CompanyStats(count=totals.count, avg_salary=totals.salary_total / totals.count)
            for name, totals in self.companies.items()
        }
        ranked_companies = sorted(companies.items(), key=lambda item: item[1].avg_salary, reverse=True)

        ranked_skills = sorted(self.skill_counts.items(), key=lambda item: item[1], reverse=True)

        return AnalyticsSummary(
            total_jobs=self.total_jobs,
            salary_ranges={
                mode: sorted(entries, key=lambda entry: entry.max, reverse=True)
                for mode, entries in self.mode_ranges.items()
            },
            salary_statistics={
                mode: SalaryStatistics.from_values(values)
                for mode, values in self.mode_averages.items()
            },
            companies=dict(ranked_companies[:TOP_COMPANIES]),
            skills=dict(ranked_skills[:TOP_SKILLS]),
            experience_levels=dict(self.experience_levels),
            timeline=self.timeline(),
        )


def compute_facts(listing: ListingRecord, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> ListingFacts:
    """
    Run the normalizer, classifier and skill extractor on one listing.

    A listing whose salary fields cannot be interpreted contributes no
    salary data point; it is still classified and scanned for skills.
    """
    salary = _safe_normalize(listing)

    return ListingFacts(
        listing=listing,
        salary=salary,
        classification=classify(listing, salary, vocabulary),
        skills=extract_skills(listing.description, vocabulary),
    )


def analyze(
    listings: Iterable[ListingRecord | dict],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    max_workers: int | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> AnalyticsSummary:
    """
    Analyze a collection of listings.

    Args:
        listings: ListingRecord instances (raw dicts are normalized with
                  ListingRecord.from_raw)
        vocabulary: Keyword tables for classification and skills
        max_workers: When greater than 1, per-listing facts are computed in
                     a thread pool, chunk by chunk; folding stays sequential
        chunk_size: Number of listings handed to the pool at a time

    Returns:
        AnalyticsSummary; an empty collection gives an all-zero summary

    Raises:
        ValueError: If listings is None
    """
    if listings is None:
        raise ValueError("listings must be a collection, got None")

    records = [_as_record(item) for item in listings]

    accumulator = AnalyticsAccumulator()
    for facts in _iter_facts(records, vocabulary, max_workers, chunk_size):
        accumulator.add(facts)

    summary = accumulator.finalize()
    logger.debug(
        "Analyzed %d listings (%d permanent, %d contract with salary)",
        summary.total_jobs,
        summary.salary_statistics["permanent"].count,
        summary.salary_statistics["contract"].count,
    )
    return summary


def generate_timeline(listings: Iterable[ListingRecord | dict]) -> list[TimelinePoint]:
    """
    Build the monthly timeline on its own.

    Same result as analyze(listings).timeline without the classification
    and skill work.
    """
    if listings is None:
        raise ValueError("listings must be a collection, got None")

    accumulator = AnalyticsAccumulator()
    for item in listings:
        listing = _as_record(item)
        if listing.posting_date is not None:
            accumulator.record_month(listing)

    return accumulator.timeline()


def _safe_normalize(listing: ListingRecord) -> NormalizedSalary | None:
    try:
        return normalize_salary(listing)
    except (TypeError, ValueError) as e:
        logger.warning("Ignoring unreadable salary of %r: %s", listing.url or listing.title, e)
        return None


def _as_record(item: ListingRecord | dict) -> ListingRecord:
    if isinstance(item, dict):
        return ListingRecord.from_raw(item)
    return item


def _iter_facts(
    records: list[ListingRecord],
    vocabulary: Vocabulary,
    max_workers: int | None,
    chunk_size: int,
) -> Iterable[ListingFacts]:
    """Yield per-listing facts in input order."""
    if not max_workers or max_workers <= 1:
        for listing in records:
            yield compute_facts(listing, vocabulary)
        return

    worker = partial(compute_facts, vocabulary=vocabulary)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for start in range(0, len(records), max(chunk_size, 1)):
            yield from executor.map(worker, records[start:start + chunk_size])
