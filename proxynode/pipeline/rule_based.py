"""Rule-based fallbacks for every analysis stage.

These functions are pure and synchronous and never fail, so the pipeline
always has a usable answer when the local model is unavailable, slow or
returns garbage.
"""

import re
from re import Pattern

from ..config import (
    ACADEMIC_KEYWORDS,
    EMAIL_PATTERN,
    ID_NUMBER_PATTERN,
    INFRASTRUCTURE_KEYWORDS,
    PERSON_NAME_PATTERN,
    PHONE_PATTERN,
    PLACEMENT_KEYWORDS,
)
from ..constants import (
    ELLIPSIS,
    EMAIL_PLACEHOLDER,
    ID_PLACEHOLDER,
    PATH_FALLBACK,
    PERSON_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    STAGES,
    SUMMARY_MAX_LENGTH,
    SUMMARY_MIN_SENTENCE_LENGTH,
    SUMMARY_TRUNCATE_LENGTH,
    SENTENCE_TERMINATORS,
)
from ..models.category import Category
from ..models.feedback import AnalysisResult

# Earlier entries win when two patterns match overlapping text
REDACTION_RULES: list[tuple[Pattern, str]] = [
    (EMAIL_PATTERN, EMAIL_PLACEHOLDER),
    (PHONE_PATTERN, PHONE_PLACEHOLDER),
    (ID_NUMBER_PATTERN, ID_PLACEHOLDER),
    (PERSON_NAME_PATTERN, PERSON_PLACEHOLDER),
]

_SENTENCE_SPLIT = re.compile(f"[{re.escape(SENTENCE_TERMINATORS)}]")


def anonymize(text: str) -> str:
    """Replace names, ID numbers, phone numbers and emails with placeholders.

    Every pattern is matched against the original text, never against
    already-substituted output. Overlapping matches are resolved by rule
    order in ``REDACTION_RULES``, so a ten digit run is a phone number
    rather than an ID even though both patterns match it.

    Args:
        text: Raw feedback text

    Returns:
        Text with identifying spans replaced

    """
    claimed: list[tuple[int, int, str]] = []

    for pattern, placeholder in REDACTION_RULES:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < c_end and c_start < end for c_start, c_end, _ in claimed):
                continue
            claimed.append((start, end, placeholder))

    if not claimed:
        return text

    pieces = []
    cursor = 0
    for start, end, placeholder in sorted(claimed):
        pieces.append(text[cursor:start])
        pieces.append(placeholder)
        cursor = end
    pieces.append(text[cursor:])

    return "".join(pieces)


def summarize(text: str) -> str:
    """Produce a one-line extractive summary.

    Takes the first sentence if it is between 10 and 100 characters long,
    otherwise the whole text if it fits in 100 characters, otherwise the
    first 97 characters followed by an ellipsis.
    """
    first_sentence = _SENTENCE_SPLIT.split(text, maxsplit=1)[0].strip()
    if SUMMARY_MIN_SENTENCE_LENGTH <= len(first_sentence) <= SUMMARY_MAX_LENGTH:
        return first_sentence

    trimmed = text.strip()
    if not trimmed:
        # Whitespace-only input has nothing to extract
        return text

    if len(trimmed) <= SUMMARY_MAX_LENGTH:
        return trimmed

    return text[:SUMMARY_TRUNCATE_LENGTH].strip() + ELLIPSIS


def keyword_scores(text: str) -> dict[Category, int]:
    """Count keyword occurrences per category (every occurrence counts)."""
    lowered = text.lower()
    return {
        Category.ACADEMICS: sum(lowered.count(k) for k in ACADEMIC_KEYWORDS),
        Category.INFRASTRUCTURE: sum(lowered.count(k) for k in INFRASTRUCTURE_KEYWORDS),
        Category.PLACEMENT: sum(lowered.count(k) for k in PLACEMENT_KEYWORDS),
    }


def classify(text: str) -> Category:
    """Classify text by keyword scores.

    Ties are broken Academics > Infrastructure > Placement. Text with no
    keyword hits at all is Other.
    """
    scores = keyword_scores(text)
    academics = scores[Category.ACADEMICS]
    infrastructure = scores[Category.INFRASTRUCTURE]
    placement = scores[Category.PLACEMENT]

    if academics == 0 and infrastructure == 0 and placement == 0:
        return Category.OTHER
    if academics >= infrastructure and academics >= placement:
        return Category.ACADEMICS
    if infrastructure >= placement:
        return Category.INFRASTRUCTURE
    return Category.PLACEMENT


def analyze_with_rules(text: str) -> AnalysisResult:
    """Run all three stages on the rule-based path.

    Summary and category are derived from the anonymized text, not the raw
    input, so that no identifier survives into the summary. Keyword scores
    can therefore differ slightly from scoring the raw text.
    """
    anonymized = anonymize(text)
    return AnalysisResult(
        original_text=text,
        anonymized_text=anonymized,
        summary=summarize(anonymized),
        category=classify(anonymized),
        stage_paths={stage: PATH_FALLBACK for stage in STAGES},
    )
