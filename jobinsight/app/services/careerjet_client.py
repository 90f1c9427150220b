"""
Careerjet public search API client.

Implements the ListingSource protocol over HTTP. Each search is a single
request; pacing between requests is the caller's concern.
"""

import math
import os

import httpx

from jobinsight.app.config import DEFAULT_CAREERJET_API_URL
from jobinsight.app.core.listing_source import NO_RESULTS_ERROR, SearchPage
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
FETCH_ERROR = "Error fetching jobs. Please try again later."


class CareerjetClient:
    """
    Careerjet search client.

    Uses the affiliate id from the constructor or the CAREERJET_AFFID env var.
    """

    source_name = "careerjet"

    def __init__(
        self,
        affid: str | None = None,
        locale: str = "en_GB",
        base_url: str = DEFAULT_CAREERJET_API_URL,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            affid: Careerjet affiliate id (falls back to CAREERJET_AFFID)
            locale: Careerjet locale code, decides the country searched
            base_url: Search endpoint
            timeout_s: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)

        Raises:
            ValueError: If no affiliate id is configured
        """
        self._affid = affid or os.getenv("CAREERJET_AFFID")
        if not self._affid:
            raise ValueError("CAREERJET_AFFID environment variable is not set")

        self._locale = locale
        self._base_url = base_url
        self._timeout = timeout_s
        self._transport = transport

    def build_params(self, keywords: str, location: str, page: int, page_size: int, **filters) -> dict:
        """
        Build query parameters for one search request.

        Page is at least 1 and the page size is clamped to 20..100.
        Optional filters: contracttype, contractperiod, salary_min, salary_max.
        """
        params = {
            "locale_code": self._locale,
            "keywords": (keywords or "").strip(),
            "location": (location or "").strip(),
            "page": max(1, int(page or 1)),
            "pagesize": max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, int(page_size or MIN_PAGE_SIZE))),
            "affid": self._affid,
            "user_ip": "127.0.0.1",
            "user_agent": "jobinsight",
        }
        for key in ("contracttype", "contractperiod", "salary_min", "salary_max"):
            if filters.get(key):
                params[key] = filters[key]
        return params

    def search(
        self, keywords: str, location: str, page: int = 1, page_size: int = 20, **filters
    ) -> SearchPage:
        """
        Run one search request.

        Returns:
            SearchPage. When Careerjet answers with anything but a job list,
            the page is empty and carries "No results found". Transport and
            HTTP status failures are logged and reported as an empty page
            with a fetch error.
        """
        params = self.build_params(keywords, location, page, page_size, **filters)
        keywords, location, page = params["keywords"], params["location"], params["page"]

        try:
            with httpx.Client(
                timeout=self._timeout, follow_redirects=True, transport=self._transport
            ) as client:
                resp = client.get(self._base_url, params=params)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "Careerjet API error for keywords=%r location=%r page=%d: %s",
                keywords, location, page, e,
            )
            return SearchPage.empty(keywords, location, page, error=FETCH_ERROR)

        if not isinstance(payload, dict) or payload.get("type") != "JOBS":
            return SearchPage.empty(keywords, location, page, error=NO_RESULTS_ERROR)

        jobs = [job for job in payload.get("jobs") or [] if isinstance(job, dict)]
        total = int(payload.get("hits") or 0)
        pages = int(payload.get("pages") or math.ceil(total / params["pagesize"]))

        return SearchPage(
            total=total,
            pages=pages,
            jobs=jobs,
            current_page=page,
            keywords=keywords,
            location=location,
        )
