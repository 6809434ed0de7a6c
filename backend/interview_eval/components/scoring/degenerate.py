"""Detect keyboard-mashed or otherwise meaningless answers."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from .lexical import tokenize
from .rules import (
    DOMINANT_CHAR_RATIO,
    KEYBOARD_ADJACENT_RUNS,
    KEYBOARD_MASH_COVERAGE,
    KEYBOARD_MASH_PATTERNS,
    KEYBOARD_RUN_LENGTH,
    MEANINGFUL_CHECK_MIN_LENGTH,
    MEANINGFUL_TOKEN_MIN_COUNT,
    MEANINGFUL_TOKEN_PATTERN,
    REPEAT_PREFIX_COVERAGE,
    REPEAT_PREFIX_MIN_COUNT,
    REPEAT_PREFIX_SIZES,
)

logger = logging.getLogger(__name__)


def _compact(text: str) -> str:
    return "".join((text or "").lower().split())


def has_dominant_character(compact: str) -> bool:
    if not compact:
        return False
    _, count = Counter(compact).most_common(1)[0]
    return count / len(compact) > DOMINANT_CHAR_RATIO


def has_repeated_prefix(compact: str) -> bool:
    for size in REPEAT_PREFIX_SIZES:
        if len(compact) < size * REPEAT_PREFIX_MIN_COUNT:
            continue
        pattern = compact[:size]
        repeats = 0
        pos = 0
        while compact.startswith(pattern, pos):
            repeats += 1
            pos += size
        if repeats >= REPEAT_PREFIX_MIN_COUNT and (repeats * size) / len(compact) > REPEAT_PREFIX_COVERAGE:
            return True
    return False


def count_meaningful_tokens(text: str) -> int:
    return sum(1 for token in tokenize(text) if MEANINGFUL_TOKEN_PATTERN.match(token))


def _mashed_chars(token: str) -> int:
    covered = [False] * len(token)
    for i in range(len(token) - KEYBOARD_RUN_LENGTH + 1):
        if token[i:i + KEYBOARD_RUN_LENGTH] in KEYBOARD_ADJACENT_RUNS:
            covered[i:i + KEYBOARD_RUN_LENGTH] = [True] * KEYBOARD_RUN_LENGTH
    for pattern in KEYBOARD_MASH_PATTERNS:
        for match in pattern.finditer(token):
            covered[match.start():match.end()] = [True] * (match.end() - match.start())
    return sum(covered)


def has_keyboard_mashing(text: str) -> bool:
    """True when mash runs cover at least half of the non-space characters.

    Runs are matched inside each whitespace-separated token, never across
    word boundaries.
    """
    tokens = (text or "").lower().split()
    total = sum(len(t) for t in tokens)
    if not total:
        return False
    return sum(_mashed_chars(t) for t in tokens) / total >= KEYBOARD_MASH_COVERAGE


def meaningless_reason(text: str) -> Optional[str]:
    """Name of the first degenerate-input rule ``text`` trips, or None."""
    compact = _compact(text)
    if not compact:
        return "empty"
    if has_dominant_character(compact):
        return "dominant_character"
    if has_repeated_prefix(compact):
        return "repeated_pattern"
    if (
        len((text or "").strip()) > MEANINGFUL_CHECK_MIN_LENGTH
        and count_meaningful_tokens(text) < MEANINGFUL_TOKEN_MIN_COUNT
    ):
        return "too_few_meaningful_tokens"
    if has_keyboard_mashing(text):
        return "keyboard_mashing"
    return None


def is_meaningless(text: str) -> bool:
    reason = meaningless_reason(text)
    if reason:
        logger.info("Degenerate answer detected (rule=%s, length=%d)", reason, len(text or ""))
        return True
    return False
