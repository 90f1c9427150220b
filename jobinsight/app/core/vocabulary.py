"""
Keyword tables shared by the classifier and the skill extractor.

All tables are built once at import time and never mutated. Callers that
need a different vocabulary build their own Vocabulary and pass it in.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Term:
    """A keyword together with its compiled whole-word pattern."""

    text: str
    pattern: re.Pattern

    @classmethod
    def compile(cls, text: str) -> "Term":
        """
        Compile a whole-word, case-insensitive pattern for a term.

        Boundaries are only enforced on edges that are word characters, so
        terms such as "sr." or "c++" still match when followed by a space.
        A leading digit must not follow a hyphen either: "5 years" is not
        found inside "3-5 years".
        """
        text = text.lower()
        prefix = ""
        suffix = ""
        if text[:1].isdigit():
            prefix = r"(?<![\w-])"
        elif re.match(r"\w", text[:1]):
            prefix = r"(?<!\w)"
        if re.match(r"\w", text[-1:]):
            suffix = r"(?!\w)"
        return cls(text, re.compile(prefix + re.escape(text) + suffix, re.IGNORECASE))

    def found_in(self, lowercase_text: str) -> bool:
        """Substring pre-check followed by the word-boundary confirmation."""
        return self.text in lowercase_text and self.pattern.search(lowercase_text) is not None


def _terms(*texts: str) -> tuple[Term, ...]:
    return tuple(Term.compile(t) for t in texts)


SKILLS = _terms(
    "java", "python", "javascript", "typescript", "php", "ruby", "golang", "kotlin", "swift",
    "react", "angular", "vue", "node", "express", "django", "flask", "laravel", "symfony",
    "sql", "mysql", "postgresql", "mongodb", "redis", "elasticsearch",
    "aws", "azure", "gcp", "docker", "kubernetes", "terraform", "jenkins", "ci/cd",
    "agile", "scrum", "kanban", "jira", "git", "github", "gitlab",
    "html", "css", "sass", "less", "tailwind", "bootstrap",
    "machine learning", "artificial intelligence", "ai", "ml", "data science",
    "devops", "system design", "microservices", "api",
)

# Matched as plain substrings, not whole words
CONTRACT_TERMS = (
    "contract", "freelance", "contractor", "interim", "temporary", "per day", "daily rate",
)

SENIOR_TERMS = _terms(
    "senior", "lead", "principal", "head", "director", "manager", "chief",
    "architect", "vp", "vice president", "expert", "specialist",
    "sr.", "sr ", "experienced", "staff", "advanced",
    "5 years", "5+ years", "6+ years", "7+ years", "8+ years", "9+ years", "10+ years",
)

JUNIOR_TERMS = _terms(
    "junior", "graduate", "trainee", "entry", "entry level", "apprentice",
    "intern", "assistant", "associate", "jr.", "jr ",
    "0-1 years", "0-2 years", "1-2 years", "1 year", "1+ years", "2 years",
    "no experience", "fresh graduate", "recent graduate",
)

MID_TERMS = _terms(
    "mid level", "intermediate", "mid-level", "mid-senior", "mid senior",
    "3-5 years", "2-4 years",
    "product owner", "product manager", "product analyst",
)

RESPONSIBILITY_TERMS = _terms(
    "team lead", "managing", "leadership", "strategic", "strategy",
)

YEARS_OF_EXPERIENCE = re.compile(
    r"(\d+)(?:\+)?\s*(?:-\s*\d+)?\s*years?(?:\s+of)?\s+experience", re.IGNORECASE
)


@dataclass(frozen=True)
class Vocabulary:
    """Bundle of keyword tables handed to the classifier and skill extractor."""

    skills: tuple[Term, ...] = SKILLS
    contract_terms: tuple[str, ...] = CONTRACT_TERMS
    senior_terms: tuple[Term, ...] = SENIOR_TERMS
    junior_terms: tuple[Term, ...] = JUNIOR_TERMS
    mid_terms: tuple[Term, ...] = MID_TERMS
    responsibility_terms: tuple[Term, ...] = RESPONSIBILITY_TERMS
    years_pattern: re.Pattern = YEARS_OF_EXPERIENCE


DEFAULT_VOCABULARY = Vocabulary()
