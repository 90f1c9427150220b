"""
Listing classifier.

Derives the employment mode (contract vs permanent) and the experience tier
(junior / mid / senior) of a listing from keyword and numeric heuristics.
"""

from dataclasses import dataclass

from jobinsight.app.core.listing_model import ListingRecord
from jobinsight.app.core.salary_normalizer import NormalizedSalary
from jobinsight.app.core.vocabulary import DEFAULT_VOCABULARY, Term, Vocabulary

SENIOR = "senior"
MID = "mid"
JUNIOR = "junior"

EXPERIENCE_TIERS = (SENIOR, MID, JUNIOR)

SENIOR_SALARY_THRESHOLD = 80000
JUNIOR_SALARY_THRESHOLD = 35000


@dataclass(frozen=True)
class Classification:
    """Employment mode and experience tier of a single listing."""

    is_contract: bool
    experience_tier: str

    def __post_init__(self):
        if self.experience_tier not in EXPERIENCE_TIERS:
            raise ValueError(
                f"experience_tier must be one of {EXPERIENCE_TIERS}, got {self.experience_tier}"
            )

    @property
    def employment_mode(self) -> str:
        return "contract" if self.is_contract else "permanent"


def classify(
    listing: ListingRecord,
    salary: NormalizedSalary | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> Classification:
    """
    Classify a listing.

    Args:
        listing: ListingRecord to classify
        salary: Normalized salary of the listing, used as a seniority hint
        vocabulary: Keyword tables to match against

    Returns:
        Classification (never fails to produce a tier)
    """
    return Classification(
        is_contract=is_contract_role(listing, vocabulary),
        experience_tier=determine_experience_level(listing, salary, vocabulary),
    )


def is_contract_role(listing: ListingRecord, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    """
    Determine if a listing is a contract role.

    Any of the following is enough:
    - a contract term anywhere in title + description
    - a contract term in the salary text
    - "day" or "daily" in the salary text
    - a daily salary period
    """
    text = f"{listing.title} {listing.description or ''}".lower()
    salary_text = (listing.salary_text or "").lower()

    if any(term in text for term in vocabulary.contract_terms):
        return True

    if any(term in salary_text for term in vocabulary.contract_terms):
        return True

    # Plain substring: "25 days holiday" also counts
    if "day" in salary_text or "daily" in salary_text:
        return True

    return (listing.salary_period or "").upper() == "D"


def determine_experience_level(
    listing: ListingRecord,
    salary: NormalizedSalary | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """
    Determine the experience tier of a listing.

    Rules are evaluated in order and the first match wins:
    senior terms, junior terms, mid terms, "N years experience",
    yearly salary level, responsibility keywords, then "mid".
    """
    text = f"{listing.title} {listing.description or ''}".lower()

    if _any_term(vocabulary.senior_terms, text):
        return SENIOR

    if _any_term(vocabulary.junior_terms, text):
        return JUNIOR

    if _any_term(vocabulary.mid_terms, text):
        return MID

    match = vocabulary.years_pattern.search(text)
    if match:
        years = int(match.group(1))
        if years >= 5:
            return SENIOR
        if years <= 2:
            return JUNIOR
        return MID

    if salary is not None and salary.source_period == "Y":
        if salary.avg_annual >= SENIOR_SALARY_THRESHOLD:
            return SENIOR
        if salary.avg_annual <= JUNIOR_SALARY_THRESHOLD:
            return JUNIOR

    if _any_term(vocabulary.responsibility_terms, text):
        return SENIOR

    return MID


def _any_term(terms: tuple[Term, ...], text: str) -> bool:
    return any(term.found_in(text) for term in terms)
