"""Answer scoring heuristics: relevance, semantic, quality, penalties, caps.

Everything here is pure: regex + math over the question, the answer, and
precomputed similarity values. Provider calls live in ``service.py``.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import List, Optional

from .lexical import extract_keywords, tokenize
from .rules import (
    BULLET_PATTERN,
    COMPLEX_LOW_COVERAGE,
    COMPLEX_LOW_COVERAGE_PENALTY,
    COMPLEX_QUESTION_MARK_COUNT,
    COMPLEX_QUESTION_PATTERNS,
    COMPLEX_SHORT_ANSWER_LENGTH,
    COMPLEX_SHORT_ANSWER_PENALTY,
    EXAMPLE_PATTERN,
    FEW_WORDS_PENALTY,
    FEW_WORDS_THRESHOLD,
    ISSUE_COMPLEX_LOW_COVERAGE,
    ISSUE_COMPLEX_TOO_SHORT,
    ISSUE_FEW_WORDS,
    ISSUE_LOW_KEYWORD_COVERAGE,
    ISSUE_MISSING_SPECIFICS,
    ISSUE_REPEATED_WORDS,
    LENGTH_CAPS,
    LENGTH_TIER_TOP,
    LENGTH_TIERS,
    LOW_COVERAGE,
    LOW_COVERAGE_MIN_KEYWORDS,
    LOW_COVERAGE_PENALTY,
    MISSING_SPECIFICS_PENALTY,
    QUALITY_MAX,
    RELEVANCE_EMBEDDING_POINTS,
    RELEVANCE_KEYWORD_POINTS,
    RELEVANCE_MAX,
    RELEVANCE_SIMILARITY_CEILING,
    RELEVANCE_SIMILARITY_FLOOR,
    REPEATED_WORD_MAX_COUNT,
    REPEATED_WORD_MIN_LENGTH,
    REPEATED_WORD_PENALTY,
    SEMANTIC_MAX,
    SENTENCE_SPLIT_PATTERN,
    SPECIFICITY_BASE,
    SPECIFICITY_DIGIT_BONUS,
    SPECIFICITY_EXAMPLE_BONUS,
    SPECIFICITY_LONG_WORD_BONUS,
    SPECIFICITY_LONG_WORD_LENGTH,
    SPECIFICITY_MAX,
    SPECIFICS_DEMAND_PATTERN,
    SPECIFICS_LONG_WORD_LENGTH,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clamp(v: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, float(v)))


def round_half_up(v: float) -> int:
    """Nearest integer with .5 rounded up, unlike the built-in round()."""
    return int(math.floor(v + 0.5))


def clamp_score(v: float) -> int:
    return int(_clamp(round_half_up(v)))


def add_issue(issues: List[str], issue: str) -> None:
    """Append ``issue`` once, keeping first-seen order."""
    if issue not in issues:
        issues.append(issue)


def count_sentences(text: str) -> int:
    if not (text or "").strip():
        return 0
    parts = [p for p in SENTENCE_SPLIT_PATTERN.split(text) if p.strip()]
    return max(1, len(parts))


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------

def score_relevance(keyword_match_ratio: float, question_answer_similarity: float) -> float:
    """Relevance on 0-25: keyword match (15) + embedding similarity (10).

    Similarity contributes linearly between 0.2 and 0.5.
    """
    span = RELEVANCE_SIMILARITY_CEILING - RELEVANCE_SIMILARITY_FLOOR
    similarity_ratio = _clamp((question_answer_similarity - RELEVANCE_SIMILARITY_FLOOR) / span, 0.0, 1.0)
    match_ratio = _clamp(keyword_match_ratio, 0.0, 1.0)

    score = RELEVANCE_KEYWORD_POINTS * match_ratio + RELEVANCE_EMBEDDING_POINTS * similarity_ratio
    return _clamp(score, 0.0, RELEVANCE_MAX)


def score_semantic(reference_similarity: float) -> float:
    """Piecewise-linear map of answer/reference similarity onto 0-40."""
    sim = max(0.0, float(reference_similarity))
    if sim < 0.3:
        score = sim * 33.33
    elif sim < 0.45:
        score = 10 + (sim - 0.3) * 100
    elif sim < 0.6:
        score = 25 + (sim - 0.45) * 66.67
    else:
        score = 35 + min(5.0, (sim - 0.6) * 12.5)
    return _clamp(score, 0.0, SEMANTIC_MAX)


def _length_points(length: int) -> int:
    for upper, points in LENGTH_TIERS:
        if length < upper:
            return points
    return LENGTH_TIER_TOP


def _sentence_points(sentences: int) -> int:
    if sentences <= 1:
        return 5
    if sentences < 3:
        return 8
    if sentences <= 5:
        return 10
    return 9


def score_specificity(answer: str) -> int:
    score = SPECIFICITY_BASE
    if EXAMPLE_PATTERN.search(answer or ""):
        score += SPECIFICITY_EXAMPLE_BONUS
    if re.search(r"\d", answer or ""):
        score += SPECIFICITY_DIGIT_BONUS
    if any(len(token) >= SPECIFICITY_LONG_WORD_LENGTH for token in tokenize(answer)):
        score += SPECIFICITY_LONG_WORD_BONUS
    return min(SPECIFICITY_MAX, score)


def score_quality(answer: str) -> float:
    """Quality on 0-35: length tier + sentence tier + specificity."""
    text = (answer or "").strip()
    score = _length_points(len(text)) + _sentence_points(count_sentences(text)) + score_specificity(text)
    return _clamp(score, 0.0, QUALITY_MAX)


def score_penalty(answer: str, issues: Optional[List[str]] = None) -> float:
    tokens = tokenize(answer)
    penalty = 0.0

    counts = Counter(t for t in tokens if len(t) >= REPEATED_WORD_MIN_LENGTH)
    if counts and counts.most_common(1)[0][1] > REPEATED_WORD_MAX_COUNT:
        penalty += REPEATED_WORD_PENALTY
        if issues is not None:
            add_issue(issues, ISSUE_REPEATED_WORDS)

    if len(tokens) < FEW_WORDS_THRESHOLD:
        penalty += FEW_WORDS_PENALTY
        if issues is not None:
            add_issue(issues, ISSUE_FEW_WORDS)

    return penalty


# ---------------------------------------------------------------------------
# Post-aggregation adjustments
# ---------------------------------------------------------------------------

def length_cap(answer: str) -> Optional[int]:
    """Highest score an answer of this trimmed length may receive (None = uncapped)."""
    length = len((answer or "").strip())
    for upper, cap in LENGTH_CAPS:
        if length < upper:
            return cap
    return None


def is_complex_question(question: str) -> bool:
    text = question or ""
    if text.count("?") + text.count("？") >= COMPLEX_QUESTION_MARK_COUNT:
        return True
    return any(pattern.search(text) for pattern in COMPLEX_QUESTION_PATTERNS)


def demands_specifics(question: str) -> bool:
    return bool(SPECIFICS_DEMAND_PATTERN.search(question or ""))


def has_specifics(answer: str) -> bool:
    text = answer or ""
    if re.search(r"\d", text):
        return True
    if any(len(token) >= SPECIFICS_LONG_WORD_LENGTH for token in tokenize(text)):
        return True
    return bool(BULLET_PATTERN.search(text))


def keyword_penalty(question: str, answer: str, coverage: float, issues: List[str]) -> float:
    """Additive penalties for complex or detail-seeking questions answered thinly."""
    penalty = 0.0
    answer_length = len((answer or "").strip())

    if is_complex_question(question):
        if answer_length < COMPLEX_SHORT_ANSWER_LENGTH:
            penalty += COMPLEX_SHORT_ANSWER_PENALTY
            add_issue(issues, ISSUE_COMPLEX_TOO_SHORT)
        if coverage < COMPLEX_LOW_COVERAGE:
            penalty += COMPLEX_LOW_COVERAGE_PENALTY
            add_issue(issues, ISSUE_COMPLEX_LOW_COVERAGE)

    if demands_specifics(question) and not has_specifics(answer):
        penalty += MISSING_SPECIFICS_PENALTY
        add_issue(issues, ISSUE_MISSING_SPECIFICS)

    if coverage < LOW_COVERAGE and len(extract_keywords(question)) >= LOW_COVERAGE_MIN_KEYWORDS:
        penalty += LOW_COVERAGE_PENALTY
        add_issue(issues, ISSUE_LOW_KEYWORD_COVERAGE)

    return penalty
