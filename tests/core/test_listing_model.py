"""
Unit tests for listing_model.py

Tests ListingRecord normalization, serialization and fingerprinting.
"""

from datetime import date, datetime

import pytest

from jobinsight.app.core.listing_model import UNKNOWN_COMPANY, ListingRecord, parse_posting_date


def test_from_raw_careerjet_payload():
    """Test normalization of a Careerjet job entry."""
    raw = {
        "title": "  Python Developer ",
        "company": "Acme",
        "locations": "London",
        "description": "Django work",
        "date": "Mon, 10 Feb 2025 08:00:00 GMT",
        "salary": "£50,000 - £60,000",
        "salary_min": "50000",
        "salary_max": 60000,
        "salary_type": "y",
        "salary_currency_code": "gbp",
        "url": "https://jobs.example.com/1",
    }

    listing = ListingRecord.from_raw(raw)

    assert listing.title == "Python Developer"
    assert listing.company == "Acme"
    assert listing.location == "London"
    assert listing.posting_date == date(2025, 2, 10)
    assert listing.salary_text == "£50,000 - £60,000"
    assert listing.salary_min == 50000.0
    assert listing.salary_max == 60000.0
    assert listing.salary_period == "Y"
    assert listing.salary_currency == "GBP"
    assert listing.url == "https://jobs.example.com/1"


def test_from_raw_alternative_keys():
    """Test alternative key names."""
    raw = {
        "job_title": "Engineer",
        "employer": "Beta Ltd",
        "location": "Leeds",
        "job_description": "Build things",
        "posting_date": "2025-03-04",
        "salary_text": "£40k",
        "salary_period": "M",
        "currency": "EUR",
        "job_url": "https://example.com/x",
    }

    listing = ListingRecord.from_raw(raw)

    assert listing.title == "Engineer"
    assert listing.company == "Beta Ltd"
    assert listing.location == "Leeds"
    assert listing.description == "Build things"
    assert listing.posting_date == date(2025, 3, 4)
    assert listing.salary_text == "£40k"
    assert listing.salary_period == "M"
    assert listing.salary_currency == "EUR"
    assert listing.url == "https://example.com/x"


def test_from_raw_missing_fields():
    """Test defaults when optional fields are absent."""
    listing = ListingRecord.from_raw({"title": "Tester"})

    assert listing.company == UNKNOWN_COMPANY
    assert listing.description == ""
    assert listing.posting_date is None
    assert listing.salary_text is None
    assert listing.salary_min is None
    assert listing.salary_period is None
    assert listing.url is None


def test_from_raw_unparseable_amount():
    """Test that non-numeric amounts become None."""
    listing = ListingRecord.from_raw({"title": "X", "salary_min": "negotiable", "salary_max": True})

    assert listing.salary_min is None
    assert listing.salary_max is None


def test_display_company_blank():
    """Test the sentinel is used for blank company names."""
    listing = ListingRecord(title="X", company="   ")
    assert listing.display_company == UNKNOWN_COMPANY


def test_listing_is_immutable():
    """Test that ListingRecord is frozen."""
    listing = ListingRecord(title="X")
    with pytest.raises(AttributeError):
        listing.title = "Y"


def test_to_dict_serializes_date():
    """Test to_dict output."""
    listing = ListingRecord(title="X", posting_date=date(2025, 1, 2))
    result = listing.to_dict()

    assert result["posting_date"] == "2025-01-02"
    assert result["company"] == UNKNOWN_COMPANY
    assert set(result) == {
        "title", "description", "company", "location", "posting_date", "salary_text",
        "salary_min", "salary_max", "salary_period", "salary_currency", "url",
    }


def test_fingerprint_ignores_url_and_date():
    """Test fingerprint stability across re-posts."""
    a = ListingRecord(title="Dev", company="Acme", url="https://a", posting_date=date(2025, 1, 1))
    b = ListingRecord(title="Dev", company="Acme", url="https://b", posting_date=date(2025, 2, 1))
    c = ListingRecord(title="Dev", company="Other")

    assert a.fingerprint() == b.fingerprint()
    assert a.fingerprint() != c.fingerprint()
    assert len(a.fingerprint()) == 64


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2025-02-10", date(2025, 2, 10)),
        ("2025-02-10T08:30:00", date(2025, 2, 10)),
        ("Tue, 11 Feb 2025 08:00:00 GMT", date(2025, 2, 11)),
        (datetime(2025, 2, 12, 9, 0), date(2025, 2, 12)),
        (date(2025, 2, 13), date(2025, 2, 13)),
        ("yesterday", None),
        ("", None),
        (None, None),
        (20250210, None),
    ],
)
def test_parse_posting_date(value, expected):
    """Test the supported posting date formats."""
    assert parse_posting_date(value) == expected
