"""Detect answers that copy or paraphrase the question itself.

Checks run cheapest and most specific first and stop at the first hit:
exact match, containment, longest common substring, character 4-gram
overlap, edit distance, and word overlap.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from .lexical import tokenize
from .rules import (
    COPY_CONTAINMENT_LENGTH_RATIO,
    COPY_EDIT_LENGTH_GAP,
    COPY_EDIT_SIMILARITY,
    COPY_LCS_MIN_LENGTH,
    COPY_LCS_RATIO,
    COPY_NGRAM_RATIO,
    COPY_NGRAM_SIZE,
    COPY_WORD_OVERLAP_LENGTH_RATIO,
    COPY_WORD_OVERLAP_RATIO,
    NON_WORD_PATTERN,
    STOP_WORDS,
)
from .schemas import CopyDetectionVerdict

logger = logging.getLogger(__name__)


def normalize_for_copy(text: str) -> str:
    return NON_WORD_PATTERN.sub("", (text or "").lower()).replace("_", "")


def longest_common_substring(a: str, b: str) -> int:
    """Length of the longest contiguous run shared by ``a`` and ``b``.

    Two rolling DP rows, O(len(a) * len(b)) time and O(len(b)) memory.
    """
    if not a or not b:
        return 0
    previous = [0] * (len(b) + 1)
    best = 0
    for i in range(1, len(a) + 1):
        current = [0] * (len(b) + 1)
        ca = a[i - 1]
        for j in range(1, len(b) + 1):
            if ca == b[j - 1]:
                current[j] = previous[j - 1] + 1
                if current[j] > best:
                    best = current[j]
        previous = current
    return best


def ngram_overlap(question: str, answer: str, n: int = COPY_NGRAM_SIZE) -> float:
    """Fraction of the question's character n-grams also present in the answer."""
    if len(question) < n or len(answer) < n:
        return 0.0
    question_grams = {question[i:i + n] for i in range(len(question) - n + 1)}
    answer_grams = {answer[i:i + n] for i in range(len(answer) - n + 1)}
    return len(question_grams & answer_grams) / len(question_grams)


def levenshtein_distance(a: str, b: str) -> int:
    m, n = len(a), len(b)
    longest = max(m, n)
    if longest == 0:
        return 0
    # Very different lengths cannot reach the similarity threshold anyway.
    if abs(m - n) > COPY_EDIT_LENGTH_GAP * longest:
        return longest

    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        table[i][0] = i
    for j in range(n + 1):
        table[0][j] = j
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )
    return table[m][n]


def edit_similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return 1.0 - levenshtein_distance(a, b) / longest


def word_overlap(question: str, answer: str, stop_words: FrozenSet[str] = STOP_WORDS) -> float:
    """Fraction of the answer's content words that also occur in the question."""
    answer_words = [w for w in tokenize(answer) if len(w) >= 2 and w not in stop_words]
    if not answer_words:
        return 0.0
    question_words = set(tokenize(question))
    shared = sum(1 for w in answer_words if w in question_words)
    return shared / len(answer_words)


def _copied(reason: str, ratio: float) -> CopyDetectionVerdict:
    return CopyDetectionVerdict(
        is_copied=True,
        reason=reason,
        copy_ratio=round(max(0.0, min(1.0, ratio)), 4),
    )


def _first_copy_match(
    question: str,
    answer: str,
    q: str,
    a: str,
    stop_words: FrozenSet[str],
) -> Optional[CopyDetectionVerdict]:
    if q == a:
        return _copied("질문과 동일한 답변", 1.0)

    if q in a and len(a) < COPY_CONTAINMENT_LENGTH_RATIO * len(q):
        return _copied("질문 전체를 거의 그대로 포함한 답변", len(q) / len(a))

    lcs = longest_common_substring(q, a)
    lcs_ratio = lcs / len(q)
    if lcs_ratio > COPY_LCS_RATIO and lcs >= COPY_LCS_MIN_LENGTH:
        return _copied("질문의 긴 구절을 그대로 사용한 답변", lcs_ratio)

    overlap = ngram_overlap(q, a)
    if overlap > COPY_NGRAM_RATIO:
        return _copied("질문과 표현이 대부분 겹치는 답변", overlap)

    similarity = edit_similarity(q, a)
    if similarity > COPY_EDIT_SIMILARITY:
        return _copied("질문을 약간만 바꾼 답변", similarity)

    words = word_overlap(question, answer, stop_words)
    if words > COPY_WORD_OVERLAP_RATIO and len(a) < COPY_WORD_OVERLAP_LENGTH_RATIO * len(q):
        return _copied("질문의 단어를 재배열한 답변", words)

    return None


def detect_copy(
    question: str,
    answer: str,
    stop_words: FrozenSet[str] = STOP_WORDS,
) -> CopyDetectionVerdict:
    q = normalize_for_copy(question)
    a = normalize_for_copy(answer)
    if not q or not a:
        return CopyDetectionVerdict(is_copied=False, reason="")

    verdict = _first_copy_match(question, answer, q, a, stop_words)
    if verdict is None:
        return CopyDetectionVerdict(is_copied=False, reason="")

    logger.info(
        "Copy detected (reason=%s, ratio=%.3f, question_len=%d, answer_len=%d)",
        verdict.reason,
        verdict.copy_ratio or 0.0,
        len(q),
        len(a),
    )
    return verdict
