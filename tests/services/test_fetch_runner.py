"""
Unit tests for fetch_runner.py

Tests page planning, pacing, stop conditions and the fetch report.
"""

import pytest

from jobinsight.app.core.listing_source import NO_RESULTS_ERROR, SearchPage
from jobinsight.app.services.fetch_runner import fetch_all_listings
from jobinsight.app.services.job_store import JobStore, create_session_factory

FETCH_ERROR = "Error fetching jobs. Please try again later."


def _jobs(start: int, count: int) -> list[dict]:
    return [
        {"title": f"Python Developer {n}", "url": f"https://jobs/{n}", "locations": "London"}
        for n in range(start, start + count)
    ]


class ScriptedSource:
    """
    Source answering a size-1 probe with `total` and each page from a script.

    Script values are job lists, or error strings for failed pages.
    """

    source_name = "scripted"

    def __init__(self, total: int, script: dict):
        self.total = total
        self.script = script
        self.calls = []

    def search(self, keywords, location, page=1, page_size=20):
        self.calls.append((page, page_size))
        if page_size == 1:
            if self.total == 0:
                return SearchPage.empty(keywords, location, page, error=NO_RESULTS_ERROR)
            return SearchPage(total=self.total, pages=self.total, jobs=[{"title": "probe"}])

        entry = self.script.get(page, [])
        if isinstance(entry, str):
            return SearchPage.empty(keywords, location, page, error=entry)
        return SearchPage(total=self.total, jobs=entry, current_page=page)


@pytest.fixture
def store():
    session_factory = create_session_factory("sqlite:///:memory:")
    with session_factory() as session:
        yield JobStore(session)


def test_fetch_all_pages(store):
    source = ScriptedSource(250, {1: _jobs(0, 100), 2: _jobs(100, 100), 3: _jobs(200, 50)})
    sleeps = []

    report = fetch_all_listings(source, store, "python", "london", sleep=sleeps.append)

    assert report.total_available == 250
    assert report.pages_planned == 3
    assert report.pages_fetched == 3
    assert report.jobs_processed == 250
    assert report.new_jobs == 250
    assert report.stored_count == 250
    assert report.percent_complete == 100.0
    assert report.stopped_early is False
    assert sleeps == [1.0, 1.0]
    assert source.calls == [(1, 1), (1, 100), (2, 100), (3, 100)]


def test_fetch_respects_max_pages(store):
    source = ScriptedSource(1000, {n: _jobs(n * 10, 10) for n in range(1, 11)})

    report = fetch_all_listings(source, store, "python", "", max_pages=2, page_size=10, delay=0)

    assert report.pages_planned == 2
    assert report.pages_fetched == 2
    assert report.stored_count == 20
    assert report.percent_complete == 2.0


def test_fetch_no_results(store):
    source = ScriptedSource(0, {})

    report = fetch_all_listings(source, store, "cobol", "", sleep=lambda s: None)

    assert report.total_available == 0
    assert report.pages_planned == 0
    assert report.pages_fetched == 0
    assert source.calls == [(1, 1)]


def test_fetch_stops_on_empty_page(store):
    source = ScriptedSource(300, {1: _jobs(0, 100), 2: []})

    report = fetch_all_listings(source, store, "python", "", delay=0)

    assert report.pages_fetched == 1
    assert report.stopped_early is True
    assert [call[0] for call in source.calls] == [1, 1, 2]


def test_fetch_stops_after_consecutive_errors(store):
    source = ScriptedSource(500, {1: FETCH_ERROR, 2: FETCH_ERROR, 3: FETCH_ERROR, 4: _jobs(0, 100)})
    sleeps = []

    report = fetch_all_listings(source, store, "python", "", sleep=sleeps.append)

    assert report.pages_fetched == 0
    assert report.stopped_early is True
    assert report.errors == [
        {"page": 1, "error": FETCH_ERROR},
        {"page": 2, "error": FETCH_ERROR},
        {"page": 3, "error": FETCH_ERROR},
    ]
    assert sleeps == [2.0, 2.0]


def test_fetch_error_counter_resets_after_success(store):
    script = {1: FETCH_ERROR, 2: FETCH_ERROR, 3: _jobs(0, 100), 4: FETCH_ERROR, 5: _jobs(100, 100)}
    source = ScriptedSource(500, script)

    report = fetch_all_listings(source, store, "python", "", delay=0)

    assert report.pages_fetched == 2
    assert len(report.errors) == 3
    assert report.stopped_early is False
    assert report.stored_count == 200


def test_fetch_counts_only_new_listings(store):
    source = ScriptedSource(150, {1: _jobs(0, 100), 2: _jobs(50, 50)})

    report = fetch_all_listings(source, store, "python", "", delay=0)

    assert report.jobs_processed == 150
    assert report.new_jobs == 100
    assert report.stored_count == 100


def test_fetch_reports_listings_without_url(store):
    source = ScriptedSource(2, {1: [{"title": "Python Developer"}, *_jobs(0, 1)]})

    report = fetch_all_listings(source, store, "python", "", delay=0)

    assert report.stored_count == 1
    assert report.errors == [
        {"page": 1, "url": None, "title": "Python Developer", "error": "Listing has no URL"}
    ]


def test_fetch_requires_keywords_or_location(store):
    with pytest.raises(ValueError, match="at least keywords or location"):
        fetch_all_listings(ScriptedSource(0, {}), store, " ", "")


def test_report_to_dict(store):
    source = ScriptedSource(100, {1: _jobs(0, 100)})

    result = fetch_all_listings(source, store, "python", "london", delay=0).to_dict()

    assert result["keywords"] == "python"
    assert result["location"] == "london"
    assert result["pages_planned"] == 1
    assert result["percent_complete"] == 100.0
    assert result["errors"] == []
