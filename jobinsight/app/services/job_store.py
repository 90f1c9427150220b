"""
Listing persistence.

Keyed-by-URL upsert store over SQLAlchemy. Supplies the listing collections
that the analytics engine consumes.
"""

from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import and_, create_engine, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from jobinsight.app.core.file_listing_source import search_terms
from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.models import Base, CareerJob
from jobinsight.app.utils.logger import get_logger

logger = get_logger(__name__)


def create_session_factory(database_url: str) -> sessionmaker:
    """
    Create a session factory and make sure the schema exists.

    Args:
        database_url: SQLAlchemy URL (e.g., sqlite:///jobinsight.db)

    Returns:
        sessionmaker bound to a new engine
    """
    engine = create_engine(database_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@dataclass
class UpsertResult:
    """Outcome of a bulk upsert."""

    stored: int = 0
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"stored": self.stored, "errors": [dict(e) for e in self.errors]}


class JobStore:
    """
    Listing store keyed by URL.

    Search semantics (find_listings / count_listings):
    - keywords are split on whitespace; words of two characters or fewer are ignored
    - every remaining word must appear in the title or the description
    - location must appear in the stored locations
    - matching is case-insensitive (SQL LIKE)
    """

    def __init__(self, session: Session):
        self.session = session

    def upsert_listings(self, listings: Iterable[ListingRecord]) -> UpsertResult:
        """
        Update-or-create listings by URL.

        Listings without a URL cannot be keyed and are reported as errors.
        Each listing is committed on its own, so one bad row does not roll
        back the others.

        Returns:
            UpsertResult with the number stored and per-listing error dicts
        """
        result = UpsertResult()

        for listing in listings:
            if not listing.url:
                result.errors.append({"url": None, "title": listing.title, "error": "Listing has no URL"})
                continue

            try:
                row = self.session.scalars(
                    select(CareerJob).where(CareerJob.url == listing.url)
                ).first()
                if row is None:
                    row = CareerJob(url=listing.url)
                    self.session.add(row)
                row.apply_listing(listing)
                self.session.commit()
                result.stored += 1
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.error("Error storing listing %s: %s", listing.url, e)
                result.errors.append({"url": listing.url, "title": listing.title, "error": str(e)})

        logger.debug(
            "Listing storage result: stored=%d errors=%d", result.stored, len(result.errors)
        )
        return result

    def find_listings(self, keywords: str = "", location: str = "") -> list[ListingRecord]:
        """Stored listings matching the search, newest first."""
        query = (
            select(CareerJob)
            .where(*self._search_filters(keywords, location))
            .order_by(CareerJob.job_date.desc(), CareerJob.id.desc())
        )
        return [row.to_listing() for row in self.session.scalars(query)]

    def count_listings(self, keywords: str = "", location: str = "") -> int:
        query = select(func.count(CareerJob.id)).where(*self._search_filters(keywords, location))
        return self.session.scalar(query) or 0

    def popular_titles(self, limit: int = 20) -> list[str]:
        """Most frequent listing titles, most common first."""
        count = func.count(CareerJob.id)
        query = (
            select(CareerJob.title)
            .group_by(CareerJob.title)
            .order_by(count.desc(), CareerJob.title)
            .limit(limit)
        )
        return list(self.session.scalars(query))

    def distinct_locations(self, limit: int = 10) -> list[str]:
        query = (
            select(CareerJob.locations)
            .where(CareerJob.locations != "")
            .distinct()
            .order_by(CareerJob.locations)
            .limit(limit)
        )
        return list(self.session.scalars(query))

    @staticmethod
    def _search_filters(keywords: str, location: str) -> list:
        filters = []
        for term in search_terms(keywords):
            pattern = f"%{term}%"
            filters.append(or_(CareerJob.title.ilike(pattern), CareerJob.description.ilike(pattern)))
        if location:
            filters.append(CareerJob.locations.ilike(f"%{location}%"))
        return [and_(*filters)] if filters else []
