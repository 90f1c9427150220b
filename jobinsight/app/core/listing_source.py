"""
Listing source interface protocol.

Defines the contract for paginated job-board search backends.
Sources return raw listing dicts that are normalized elsewhere
into canonical ListingRecord instances.
"""

from dataclasses import dataclass, field
from typing import Protocol

# Error indicator of a search that ran fine but matched nothing
NO_RESULTS_ERROR = "No results found"


@dataclass
class SearchPage:
    """
    One page of search results.

    Attributes:
        total: Total number of hits for the query
        pages: Total number of pages for the requested page size
        jobs: Raw listing dicts on this page
        current_page: 1-based page number
        keywords: Keywords the search ran with
        location: Location the search ran with
        error: Error indicator when the backend failed or found nothing
    """

    total: int = 0
    pages: int = 0
    jobs: list[dict] = field(default_factory=list)
    current_page: int = 1
    keywords: str = ""
    location: str = ""
    error: str | None = None

    @classmethod
    def empty(cls, keywords: str, location: str, page: int, error: str | None = None) -> "SearchPage":
        return cls(current_page=page, keywords=keywords, location=location, error=error)

    @classmethod
    def from_dict(cls, data: dict) -> "SearchPage":
        params = data.get("search_params") or {}
        return cls(
            total=int(data.get("total") or 0),
            pages=int(data.get("pages") or 0),
            jobs=list(data.get("jobs") or []),
            current_page=int(data.get("current_page") or 1),
            keywords=params.get("keywords", ""),
            location=params.get("location", ""),
            error=data.get("error"),
        )

    def to_dict(self) -> dict:
        result = {
            "total": self.total,
            "pages": self.pages,
            "jobs": [dict(job) for job in self.jobs],
            "current_page": self.current_page,
            "search_params": {
                "keywords": self.keywords,
                "location": self.location,
            },
        }
        if self.error is not None:
            result["error"] = self.error
        return result


class ListingSource(Protocol):
    """
    Protocol for listing search backends.

    Any class implementing this protocol can feed the aggregator, the fetch
    runner and the analytics service.

    Attributes:
        source_name: Unique identifier for this source (e.g., "careerjet")

    Methods:
        search: Retrieve one page of raw listings for a keyword/location query
    """

    @property
    def source_name(self) -> str:
        """
        Unique identifier for this source.

        Returns:
            Source name string (e.g., "careerjet", "fixtures")
        """
        ...

    def search(
        self, keywords: str, location: str, page: int = 1, page_size: int = 20
    ) -> SearchPage:
        """
        Fetch one page of raw listings.

        Args:
            keywords: Free-text keywords, may be empty
            location: Free-text location, may be empty
            page: 1-based page number
            page_size: Listings per page

        Returns:
            SearchPage; zero results or backend failures are reported through
            SearchPage.error rather than raised
        """
        ...
