"""
Unit tests for the precache CLI.

Redis is replaced with an in-memory fake; listings come from a SQLite file
seeded with the sample fixture.
"""

import json
from pathlib import Path

import pytest

from jobinsight.app.core.file_listing_source import FileListingSource
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.services.job_store import JobStore, create_session_factory
from jobinsight.app.tasks.result_cache import analytics_cache_key

FIXTURE = Path(__file__).parent.parent / "fixtures" / "listings_sample.json"


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, name):
        return self.data.get(name)

    def setex(self, name, time, value):
        self.data[name] = value
        self.ttls[name] = time

    def delete(self, *names):
        for name in names:
            self.data.pop(name, None)


class FakeRedisClient:
    def __init__(self, backend):
        self.backend = backend

    def connect(self, url):
        return self.backend


@pytest.fixture
def backend(tmp_path, monkeypatch):
    database_url = f"sqlite:///{tmp_path / 'jobs.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)

    session_factory = create_session_factory(database_url)
    with session_factory() as session:
        raw_jobs = FileListingSource("fixtures", str(FIXTURE)).load_raw_jobs()
        JobStore(session).upsert_listings(ListingRecord.from_raw(raw) for raw in raw_jobs)

    fake = FakeRedis()
    monkeypatch.setattr("jobinsight.scripts.precache.get_redis_client", lambda: FakeRedisClient(fake))
    return fake


def test_precache_cli_single_search(backend, capsys):
    from jobinsight.scripts.precache import main

    exit_code = main(["--keywords", "python", "--location", "london", "--days", "7", "--no-fetch"])

    assert exit_code == 0

    result = json.loads(capsys.readouterr().out)
    key = analytics_cache_key("python", "london")

    assert result["mode"] == "search"
    assert result["cached"] == 1
    assert result["results"][0]["job_count"] == 4
    assert backend.ttls[key] == 7 * 86400

    cached = json.loads(backend.data[key])
    assert cached["meta"]["pre_cached"] is True
    assert cached["total_results"] == 4


def test_precache_cli_popular_searches(backend, capsys):
    from jobinsight.scripts.precache import main

    exit_code = main(["--no-fetch"])

    assert exit_code == 0

    result = json.loads(capsys.readouterr().out)

    assert result["mode"] == "popular"
    assert result["searches"] == 11
    assert result["cached"] == 11
    assert result["failed"] == 0
    assert analytics_cache_key("", "Manchester") in backend.data


def test_precache_cli_common_searches(backend, capsys):
    from jobinsight.app.services.precache import COMMON_JOB_ROLES, COMMON_LOCATIONS
    from jobinsight.scripts.precache import main

    exit_code = main(["--common-searches", "--no-fetch"])

    assert exit_code == 0

    result = json.loads(capsys.readouterr().out)

    assert result["mode"] == "common"
    assert result["searches"] == len(COMMON_JOB_ROLES) * len(COMMON_LOCATIONS)
    assert result["failed"] == 0
    assert analytics_cache_key("python", "london") in backend.data
    assert analytics_cache_key("java", "leeds") not in backend.data
