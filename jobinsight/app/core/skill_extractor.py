"""
Skill extraction from listing descriptions.
"""

from jobinsight.app.core.vocabulary import DEFAULT_VOCABULARY, Vocabulary


def extract_skills(text: str | None, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """
    Extract known skills from free text.

    Matching is case-insensitive and whole-word (whole-phrase for
    multi-word skills), so "rapid" does not count as "api".

    Args:
        text: Description text, possibly empty or None
        vocabulary: Keyword tables to match against

    Returns:
        Deduplicated skill names in vocabulary order
    """
    if not text:
        return []

    lowercase_text = text.lower()
    return [skill.text for skill in vocabulary.skills if skill.found_in(lowercase_text)]
