"""
Unit tests for file_listing_source.py

Tests loading, filtering and pagination of file-backed listings.
"""

import json
from pathlib import Path

import pytest

from jobinsight.app.core.file_listing_source import (
    NO_SALARY_TEXT,
    FileListingSource,
    format_salary,
    matches_filters,
    matches_search,
    search_terms,
)
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.listing_source import NO_RESULTS_ERROR

FIXTURE = Path(__file__).parent.parent / "fixtures" / "listings_sample.json"


def test_load_raw_jobs_wrapped_format():
    source = FileListingSource("fixtures", str(FIXTURE))

    jobs = source.load_raw_jobs()

    assert len(jobs) == 7
    assert source.source_name == "fixtures"


def test_load_raw_jobs_list_format(tmp_path):
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps([{"title": "A"}, {"title": "B"}]), encoding="utf-8")

    assert FileListingSource("list", str(path)).load_raw_jobs() == [{"title": "A"}, {"title": "B"}]


def test_load_raw_jobs_missing_file(tmp_path):
    source = FileListingSource("missing", str(tmp_path / "nope.json"))

    with pytest.raises(FileNotFoundError, match="Listing data file not found"):
        source.load_raw_jobs()


def test_load_raw_jobs_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON"):
        FileListingSource("broken", str(path)).load_raw_jobs()


def test_load_raw_jobs_wrong_structure(tmp_path):
    path = tmp_path / "wrong.json"
    path.write_text(json.dumps({"results": []}), encoding="utf-8")

    with pytest.raises(ValueError, match="Expected JSON to be a list"):
        FileListingSource("wrong", str(path)).load_raw_jobs()

    path.write_text(json.dumps({"jobs": "nope"}), encoding="utf-8")
    with pytest.raises(ValueError, match="Expected 'jobs' key to contain a list"):
        FileListingSource("wrong", str(path)).load_raw_jobs()


def test_search_filters_keywords_and_location():
    source = FileListingSource("fixtures", str(FIXTURE))

    page = source.search("python", "london")

    assert page.error is None
    assert page.total == 4
    assert [job["url"] for job in page.jobs] == [
        "https://jobs.example.com/1",
        "https://jobs.example.com/2",
        "https://jobs.example.com/4",
        "https://jobs.example.com/7",
    ]


def test_search_paginates():
    source = FileListingSource("fixtures", str(FIXTURE))

    first = source.search("", "", page=1, page_size=3)
    last = source.search("", "", page=3, page_size=3)

    assert first.total == 7
    assert first.pages == 3
    assert len(first.jobs) == 3
    assert last.current_page == 3
    assert [job["url"] for job in last.jobs] == ["https://jobs.example.com/7"]


def test_search_no_matches():
    page = FileListingSource("fixtures", str(FIXTURE)).search("cobol", "")

    assert page.jobs == []
    assert page.total == 0
    assert page.error == NO_RESULTS_ERROR


def test_search_terms_drop_short_words():
    assert search_terms("a UX designer in AI") == ["designer"]
    assert search_terms("") == []
    assert search_terms(None) == []


def test_matches_search_case_insensitive():
    raw = {"title": "Python Developer", "description": "Django", "locations": "Greater London"}

    assert matches_search(raw, "PYTHON django", "london")
    assert not matches_search(raw, "python flask", "")
    assert not matches_search(raw, "", "leeds")
    assert matches_search(raw, "", "")


def _fixture_listings() -> list[ListingRecord]:
    jobs = FileListingSource("fixtures", str(FIXTURE)).load_raw_jobs()
    return [ListingRecord.from_raw(job) for job in jobs]


def test_matches_filters_contract_type():
    listings = _fixture_listings()

    contract = [job.company for job in listings if matches_filters(job, contract_type="contract")]
    permanent = [job for job in listings if matches_filters(job, contract_type="permanent")]

    assert contract == ["Northwind Consulting"]
    assert len(permanent) == 6
    assert all(matches_filters(job, contract_type="all") for job in listings)


def test_matches_filters_compares_annualized_salary():
    """Test salary bounds use the annualized, currency-converted range."""
    listings = _fixture_listings()

    at_least_60k = [job.url for job in listings if matches_filters(job, salary_min=60000)]
    at_most_35k = [job.url for job in listings if matches_filters(job, salary_max=35000)]

    # Day rate 450-550 is 117k-143k a year; EUR 60k-70k is 51k-59.5k
    assert at_least_60k == ["https://jobs.example.com/1", "https://jobs.example.com/4"]
    assert at_most_35k == ["https://jobs.example.com/3"]


def test_matches_filters_without_salary():
    listing = ListingRecord(title="Developer", salary_text="Competitive")

    assert matches_filters(listing)
    assert not matches_filters(listing, salary_min=1)


def test_matches_filters_unknown_contract_type():
    with pytest.raises(ValueError, match="contract_type must be one of"):
        matches_filters(ListingRecord(title="Developer"), contract_type="temp")


@pytest.mark.parametrize(
    "listing,expected",
    [
        (ListingRecord(title="A", salary_min=450, salary_max=550, salary_period="D"), "£450-550 per day"),
        (ListingRecord(title="A", salary_min=60000, salary_max=70000, salary_period="y",
                       salary_currency="EUR"), "€60,000-70,000 per year"),
        (ListingRecord(title="A", salary_min=2500, salary_period="M"), "£2,500-2,500 per month"),
        (ListingRecord(title="A", salary_min=50000, salary_period="Y", salary_currency="USD"),
         "USD 50,000-50,000 per year"),
        (ListingRecord(title="A", salary_text="£55k"), NO_SALARY_TEXT),
        (ListingRecord(title="A", salary_min=500, salary_period="W"), NO_SALARY_TEXT),
    ],
)
def test_format_salary(listing, expected):
    assert format_salary(listing) == expected
