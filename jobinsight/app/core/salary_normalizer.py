"""
Salary normalization.

Turns the pay information of a listing into an annualized range in the
reference currency (GBP). Pure functions, no I/O.
"""

import re
from dataclasses import dataclass

from jobinsight.app.core.listing_model import ListingRecord

REFERENCE_CURRENCY = "GBP"

# Working days (260), months (12), hours (40h x 52wk) per year
PERIOD_MULTIPLIERS = {
    "Y": 1,
    "M": 12,
    "D": 260,
    "H": 2080,
}

# Approximate rates into the reference currency
CURRENCY_RATES = {
    "EUR": 0.85,
}

@dataclass(frozen=True)
class NormalizedSalary:
    """
    Annualized salary range in the reference currency.

    Invariants: min_annual <= max_annual and
    avg_annual == (min_annual + max_annual) / 2.
    """

    min_annual: float
    max_annual: float
    avg_annual: float
    source_period: str

    def __post_init__(self):
        """Validate range invariants."""
        if self.min_annual > self.max_annual:
            raise ValueError(
                f"min_annual must not exceed max_annual, got {self.min_annual} > {self.max_annual}"
            )

    @classmethod
    def from_range(cls, low: float, high: float, source_period: str) -> "NormalizedSalary":
        """Build from an unordered pair, deriving the average."""
        low, high = min(low, high), max(low, high)
        return cls(
            min_annual=low,
            max_annual=high,
            avg_annual=(low + high) / 2,
            source_period=source_period,
        )

    def to_dict(self) -> dict:
        return {
            "min": self.min_annual,
            "max": self.max_annual,
            "avg": self.avg_annual,
            "type": self.source_period,
        }


def normalize_salary(listing: ListingRecord) -> NormalizedSalary | None:
    """
    Normalize the pay information of a listing.

    Structured fields (salary_min + salary_period) win over the free-text
    salary. Zero amounts count as "no salary data".

    Args:
        listing: ListingRecord to normalize

    Returns:
        NormalizedSalary, or None when the listing carries no usable pay data
    """
    structured = _normalize_structured(listing)
    if structured is not None:
        return structured

    amount = parse_salary_text(listing.salary_text)
    if amount is None:
        return None

    amount = convert_currency(float(amount), listing.salary_currency)
    return NormalizedSalary.from_range(amount, amount, "Y")


def _normalize_structured(listing: ListingRecord) -> NormalizedSalary | None:
    """Annualize salary_min/salary_max using the period multiplier."""
    if listing.salary_min is None or not listing.salary_period:
        return None

    low = listing.salary_min
    high = listing.salary_max if listing.salary_max else low
    if low <= 0:
        return None

    period = listing.salary_period.upper()
    # Unknown periods are taken as yearly
    if period not in PERIOD_MULTIPLIERS:
        period = "Y"
    multiplier = PERIOD_MULTIPLIERS[period]

    low = convert_currency(low * multiplier, listing.salary_currency)
    high = convert_currency(high * multiplier, listing.salary_currency)

    return NormalizedSalary.from_range(low, high, period)


def convert_currency(amount: float, currency: str | None) -> float:
    """Express an amount in the reference currency."""
    if not currency:
        return amount
    return amount * CURRENCY_RATES.get(currency.upper(), 1)


def parse_salary_text(text: str | None) -> int | None:
    """
    Extract a yearly amount from a free-text salary.

    Everything except digits and the letter k is dropped first. If a k
    survives, the remaining digits are thousands ("£30kpa" -> 30000);
    otherwise they are read as-is ("45,000 per year" -> 45000). Decimal
    points are stripped too, so "£42.5k" reads as 425000.

    Args:
        text: Free-text salary, e.g. "£45k", "45,000 per year"

    Returns:
        Positive integer amount, or None when nothing usable is found
    """
    if not text:
        return None

    stripped = re.sub(r"[^0-9kK]", "", text)
    digits = re.sub(r"[kK]", "", stripped)
    if not digits:
        return None

    amount = int(digits)
    if digits != stripped:
        amount *= 1000

    return amount if amount > 0 else None


def annualized_minimum(listing: ListingRecord) -> float | None:
    """
    Annualized salary_min in the reference currency.

    Used by the timeline. Only structured amounts count; a missing or
    unknown period is taken as yearly.
    """
    if not listing.salary_min or listing.salary_min <= 0:
        return None

    period = (listing.salary_period or "Y").upper()
    amount = listing.salary_min * PERIOD_MULTIPLIERS.get(period, 1)
    return convert_currency(amount, listing.salary_currency)
