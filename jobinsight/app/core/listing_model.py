"""
Listing domain model.

Canonical representation of job listings used across collection,
persistence, and analytics.
"""

import hashlib
import json
import re
from dataclasses import dataclass
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from typing import Any

UNKNOWN_COMPANY = "Unknown"


@dataclass(frozen=True)
class ListingRecord:
    """
    Canonical job listing.

    Normalized representation of a listing as returned by a job board API
    or loaded from storage. Supports messy input normalization via
    from_raw() classmethod.

    Salary fields are optional. A listing with both salary_min and
    salary_period set carries structured pay data; otherwise salary_text
    is the only (free-text) source of pay information.
    """

    title: str
    description: str = ""
    company: str = UNKNOWN_COMPANY
    location: str = ""
    posting_date: date | None = None
    salary_text: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    salary_period: str | None = None
    salary_currency: str | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict) -> "ListingRecord":
        """
        Create ListingRecord from messy raw input.

        Normalizes alternative key names and formats into canonical fields.
        Understands the Careerjet payload keys (locations, date, salary,
        salary_type, salary_currency_code).

        Args:
            raw: Raw listing dict with potentially messy/alternative keys

        Returns:
            Normalized ListingRecord instance
        """
        title = cls._normalize_string(
            cls._get_first_value(raw, ["title", "job_title", "position"])
        )

        description = cls._normalize_string(
            cls._get_first_value(raw, ["description", "job_description", "summary"])
        )

        company = cls._normalize_string(
            cls._get_first_value(raw, ["company", "employer", "company_name"])
        )

        location = cls._normalize_string(
            cls._get_first_value(raw, ["locations", "location", "job_location"])
        )

        posting_date = parse_posting_date(
            cls._get_first_value(raw, ["date", "job_date", "posting_date", "posted_date"])
        )

        salary_text = cls._normalize_string(
            cls._get_first_value(raw, ["formatted_salary", "salary", "salary_text"])
        )

        salary_min = cls._parse_amount(raw.get("salary_min"))
        salary_max = cls._parse_amount(raw.get("salary_max"))

        salary_period = cls._normalize_code(
            cls._get_first_value(raw, ["salary_type", "salary_period"])
        )
        salary_currency = cls._normalize_code(
            cls._get_first_value(raw, ["salary_currency_code", "salary_currency", "currency"])
        )

        url = cls._normalize_string(
            cls._get_first_value(raw, ["url", "job_url", "link"])
        )

        return cls(
            title=title,
            description=description,
            company=company or UNKNOWN_COMPANY,
            location=location,
            posting_date=posting_date,
            salary_text=salary_text or None,
            salary_min=salary_min,
            salary_max=salary_max,
            salary_period=salary_period,
            salary_currency=salary_currency,
            url=url or None,
        )

    @staticmethod
    def _get_first_value(data: dict, keys: list[str], default: Any = None) -> Any:
        """Get first non-None value from dict using list of possible keys."""
        for key in keys:
            if data.get(key) is not None:
                return data[key]
        return default

    @staticmethod
    def _normalize_string(value: Any) -> str:
        """Normalize value to stripped string."""
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _normalize_code(value: Any) -> str | None:
        """Normalize short codes (salary period, currency) to upper case."""
        if value is None:
            return None
        code = str(value).strip().upper()
        return code or None

    @staticmethod
    def _parse_amount(value: Any) -> float | None:
        """
        Parse a structured salary amount.

        Handles:
        - int/float: direct conversion
        - string: "50000", "50,000.00", "£50,000"
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            return float(value)

        if isinstance(value, str):
            cleaned = re.sub(r"[^\d.]", "", value)
            if cleaned:
                try:
                    return float(cleaned)
                except ValueError:
                    return None

        return None

    @property
    def display_company(self) -> str:
        """Company name with the sentinel substituted for blanks."""
        return self.company.strip() if self.company and self.company.strip() else UNKNOWN_COMPANY

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "title": self.title,
            "description": self.description,
            "company": self.company,
            "location": self.location,
            "posting_date": self.posting_date.isoformat() if self.posting_date else None,
            "salary_text": self.salary_text,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "salary_period": self.salary_period,
            "salary_currency": self.salary_currency,
            "url": self.url,
        }

    def fingerprint(self) -> str:
        """
        Generate deterministic SHA-256 fingerprint of the listing content.

        Used to deduplicate listings that carry no URL. The URL itself and
        the posting date are excluded so re-posted copies collapse together.

        Returns:
            64-character hex string (SHA-256 hash)
        """
        canonical = {
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "salary_text": self.salary_text,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "salary_period": self.salary_period,
            "salary_currency": self.salary_currency,
        }

        canonical_json = json.dumps(
            canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=True
        )

        return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def parse_posting_date(value: Any) -> date | None:
    """
    Parse a posting date from the formats job boards hand out.

    Handles:
    - date / datetime instances
    - ISO strings: "2025-02-10", "2025-02-10T08:00:00"
    - RFC 2822 strings: "Mon, 10 Feb 2025 08:00:00 GMT" (Careerjet)

    Returns:
        date, or None when the value cannot be interpreted
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()

    try:
        return datetime.fromisoformat(text[:19] if "T" in text else text[:10]).date()
    except ValueError:
        pass

    try:
        return parsedate_to_datetime(text).date()
    except (TypeError, ValueError, IndexError):
        return None
