"""Tokenization, stop-word filtering, and keyword coverage."""

from __future__ import annotations

from typing import FrozenSet, List

from .rules import JOSA_SUFFIXES, STOP_WORDS, TOKEN_PATTERN


def tokenize(text: str) -> List[str]:
    return TOKEN_PATTERN.findall((text or "").lower())


def _strip_josa(token: str) -> str:
    for suffix in JOSA_SUFFIXES:
        if token.endswith(suffix) and len(token) - len(suffix) >= 2:
            return token[: -len(suffix)]
    return token


def extract_keywords(text: str, stop_words: FrozenSet[str] = STOP_WORDS) -> List[str]:
    """Content words of ``text`` in first-seen order.

    Tokens shorter than two characters and stop words are dropped; a trailing
    Korean particle is removed when the stem keeps at least two characters.
    """
    out: List[str] = []
    seen: set[str] = set()
    for token in tokenize(text):
        if len(token) < 2 or token in stop_words:
            continue
        stem = _strip_josa(token)
        if stem in stop_words or stem in seen:
            continue
        seen.add(stem)
        out.append(stem)
    return out


def matched_keywords(keywords: List[str], answer: str) -> List[str]:
    lowered = (answer or "").lower()
    return [kw for kw in keywords if kw in lowered]


def keyword_coverage(question: str, answer: str, stop_words: FrozenSet[str] = STOP_WORDS) -> float:
    """Share of the question's keywords that appear in the answer.

    A question without keywords is fully covered by any answer.
    """
    keywords = extract_keywords(question, stop_words)
    if not keywords:
        return 1.0
    return len(matched_keywords(keywords, answer)) / len(keywords)
