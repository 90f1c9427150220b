"""
Stored job listing.

One row per listing URL. Listings are written by JobStore.upsert_listings()
and read back as ListingRecord instances for analytics.
"""

from sqlalchemy import Column, Date, Index, Integer, Numeric, String, Text

from jobinsight.app.core.listing_model import UNKNOWN_COMPANY, ListingRecord
from jobinsight.app.models.base import Base, TimestampMixin


class CareerJob(TimestampMixin, Base):
    """
    Persisted job listing keyed by URL.

    salary_type holds the pay period code: Y yearly, M monthly, D daily,
    H hourly.
    """

    __tablename__ = "career_jobs"

    id = Column(Integer, primary_key=True)
    url = Column(String(2048), nullable=False, unique=True)
    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    company = Column(Text, nullable=False, default=UNKNOWN_COMPANY)
    locations = Column(Text, nullable=False, default="")
    salary = Column(Text, nullable=True)
    job_date = Column(Date, nullable=True)
    salary_min = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    salary_max = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    salary_type = Column(String(5), nullable=True)
    salary_currency_code = Column(String(5), nullable=True)

    __table_args__ = (
        Index("ix_career_jobs_job_date", "job_date"),
    )

    def apply_listing(self, listing: ListingRecord) -> None:
        """Copy listing fields onto this row (URL excluded)."""
        self.title = listing.title
        self.description = listing.description or ""
        self.company = listing.display_company
        self.locations = listing.location or ""
        self.salary = listing.salary_text
        self.job_date = listing.posting_date
        self.salary_min = listing.salary_min
        self.salary_max = listing.salary_max
        self.salary_type = listing.salary_period
        self.salary_currency_code = listing.salary_currency

    def to_listing(self) -> ListingRecord:
        """Convert the row back into a ListingRecord."""
        return ListingRecord(
            title=self.title or "",
            description=self.description or "",
            company=self.company or UNKNOWN_COMPANY,
            location=self.locations or "",
            posting_date=self.job_date,
            salary_text=self.salary,
            salary_min=float(self.salary_min) if self.salary_min is not None else None,
            salary_max=float(self.salary_max) if self.salary_max is not None else None,
            salary_period=self.salary_type,
            salary_currency=self.salary_currency_code,
            url=self.url,
        )
