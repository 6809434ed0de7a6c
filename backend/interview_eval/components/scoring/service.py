"""Answer scoring orchestration.

One pass runs through fixed stages; each gate may end the pass early:

    LengthGate -> DegenerateGate -> EmbedAndTopicGate -> CopyGate
    -> SubScoring -> LengthCap -> KeywordPenalty -> CompletenessCheck
    -> FeedbackGeneration

Heuristics live in ``scoring_core.py``; this module owns provider calls
and the order in which results are combined.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Tuple

from ...platform.config import settings
from ..feedback.narrative import generate_feedback
from ..integrations.providers import (
    DETERMINISTIC,
    EmbeddingProvider,
    GenerationError,
    GenerationOptions,
    GenerationProvider,
    with_timeout,
)
from .copy_detection import detect_copy
from .degenerate import is_meaningless
from .lexical import keyword_coverage
from .rules import (
    FEEDBACK_COPIED,
    FEEDBACK_MEANINGLESS,
    FEEDBACK_OFF_TOPIC,
    FEEDBACK_TOO_SHORT,
    INCOMPLETE_ANSWER_PENALTY,
    ISSUE_COPIED,
    ISSUE_INCOMPLETE,
    ISSUE_LENGTH_CAPPED,
    ISSUE_MEANINGLESS,
    ISSUE_OFF_TOPIC,
    ISSUE_TOO_SHORT,
    MIN_ANSWER_LENGTH,
    TOPIC_PARTIAL_MULTIPLIER,
    TOPIC_SIMILARITY_THRESHOLD,
    TOPIC_ZERO_THRESHOLD,
)
from .schemas import EvaluationInput, FeedbackResult, ScoreBreakdown
from .scoring_core import (
    add_issue,
    clamp_score,
    keyword_penalty,
    length_cap,
    score_penalty,
    score_quality,
    score_relevance,
    score_semantic,
)
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

KEYWORD_OPTIONS = GenerationOptions(temperature=0.0, max_output_tokens=128)

KEYWORD_PROMPT = """다음 면접 질문에 좋은 답변이라면 반드시 포함해야 할 핵심 키워드를 5-10개 추출하세요.
키워드만 쉼표로 구분해 한 줄로 출력하세요. 다른 설명은 쓰지 마세요.

질문: {question}
"""

COMPLETENESS_PROMPT = """다음 면접 질문이 명시적으로 요구하는 내용을 답변이 모두 다루고 있는지 판단하세요.
다루고 있으면 "YES", 그렇지 않으면 "NO"만 출력하세요.

질문: {question}

답변: {answer}
"""

_YES = re.compile(r"^\W*(yes|예|네|true)\b", re.IGNORECASE)
_NO = re.compile(r"^\W*(no|아니오|아니요|false)\b", re.IGNORECASE)


def _parse_keywords(raw: str) -> List[str]:
    # Tolerate bullets, numbering, and newline-separated lists.
    parts = re.split(r"[,\n、]+", raw or "")
    out: List[str] = []
    for part in parts:
        cleaned = re.sub(r"^\s*(?:[-*•]|\d+[.)])\s*", "", part).strip().strip("\"'")
        if cleaned and cleaned not in out:
            out.append(cleaned)
    return out


async def extract_reference_keywords(question: str, generator: GenerationProvider) -> List[str]:
    """Model-suggested keywords for a good answer; [] when generation fails."""
    try:
        raw = await with_timeout(
            generator.generate(KEYWORD_PROMPT.format(question=question.strip()), KEYWORD_OPTIONS),
            settings.PROVIDER_TIMEOUT_SECONDS,
            label="keyword_extraction",
        )
    except GenerationError as e:
        logger.warning("Keyword extraction failed, falling back to raw question: %s", e)
        return []
    return _parse_keywords(raw)


async def _embed(text: str, embedder: EmbeddingProvider, label: str) -> List[float]:
    try:
        return await with_timeout(embedder.embed(text), settings.PROVIDER_TIMEOUT_SECONDS, label=label)
    except GenerationError:
        return []


async def _reference_embedding(
    question: str,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
) -> List[float]:
    keywords = await extract_reference_keywords(question, generator)
    reference_text = ", ".join(keywords) if keywords else question
    return await _embed(reference_text, embedder, "reference_embedding")


async def _embed_all(
    question: str,
    answer: str,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
) -> Tuple[List[float], List[float], List[float]]:
    question_vec, answer_vec, reference_vec = await asyncio.gather(
        _embed(question, embedder, "question_embedding"),
        _embed(answer, embedder, "answer_embedding"),
        _reference_embedding(question, embedder, generator),
    )
    return question_vec, answer_vec, reference_vec


async def check_completeness(question: str, answer: str, generator: GenerationProvider) -> bool:
    """Binary judgment whether the answer covers the question's explicit asks.

    Provider failures and unrecognised replies count as complete.
    """
    try:
        raw = await with_timeout(
            generator.generate(COMPLETENESS_PROMPT.format(question=question.strip(), answer=answer.strip()), DETERMINISTIC),
            settings.PROVIDER_TIMEOUT_SECONDS,
            label="completeness_check",
        )
    except GenerationError as e:
        logger.warning("Completeness check unavailable, treating answer as complete: %s", e)
        return True

    text = (raw or "").strip()
    if _NO.match(text):
        return False
    if not _YES.match(text):
        logger.info("Unrecognised completeness reply, treating as complete: %r", text[:40])
    return True


def _rejected(score: int, feedback: str, issue: str) -> FeedbackResult:
    return FeedbackResult(score=score, feedback=feedback, issues=[issue])


async def score_answer(
    question: str,
    answer: str,
    *,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
) -> FeedbackResult:
    """Score ``answer`` to ``question`` on 0-100 with issues and narrative feedback."""
    inputs = EvaluationInput(question=question or "", answer=answer or "")
    question = inputs.question
    trimmed = inputs.answer.strip()

    # LengthGate
    if len(trimmed) < MIN_ANSWER_LENGTH:
        logger.info("Answer rejected: too short (length=%d)", len(trimmed))
        return _rejected(0, FEEDBACK_TOO_SHORT, ISSUE_TOO_SHORT)

    # DegenerateGate
    if is_meaningless(trimmed):
        return _rejected(0, FEEDBACK_MEANINGLESS, ISSUE_MEANINGLESS)

    # EmbedAndTopicGate
    question_vec, answer_vec, reference_vec = await _embed_all(question, trimmed, embedder, generator)
    topic_similarity = cosine_similarity(question_vec, answer_vec)
    if topic_similarity < TOPIC_SIMILARITY_THRESHOLD:
        score = 0 if topic_similarity < TOPIC_ZERO_THRESHOLD else clamp_score(topic_similarity * TOPIC_PARTIAL_MULTIPLIER)
        logger.info("Answer rejected: off topic (similarity=%.3f, score=%d)", topic_similarity, score)
        return _rejected(score, FEEDBACK_OFF_TOPIC, ISSUE_OFF_TOPIC)

    # CopyGate
    verdict = detect_copy(question, trimmed)
    if verdict.is_copied:
        return _rejected(0, f"{FEEDBACK_COPIED} ({verdict.reason})", ISSUE_COPIED)

    # SubScoring
    issues: List[str] = []
    coverage = keyword_coverage(question, trimmed)
    reference_similarity = cosine_similarity(answer_vec, reference_vec)
    relevance = score_relevance(coverage, topic_similarity)
    semantic = score_semantic(reference_similarity)
    quality = score_quality(trimmed)
    penalty = score_penalty(trimmed, issues)
    raw_score = relevance + semantic + quality - penalty
    final_score = clamp_score(raw_score)

    # LengthCap
    cap = length_cap(trimmed)
    if cap is not None and final_score > cap:
        final_score = cap
        add_issue(issues, ISSUE_LENGTH_CAPPED)

    # KeywordPenalty
    kw_penalty = keyword_penalty(question, trimmed, coverage, issues)
    final_score = clamp_score(final_score - kw_penalty)

    # CompletenessCheck
    completeness_penalty = 0.0
    if not await check_completeness(question, trimmed, generator):
        completeness_penalty = INCOMPLETE_ANSWER_PENALTY
        add_issue(issues, ISSUE_INCOMPLETE)
        final_score = clamp_score(final_score - completeness_penalty)

    breakdown = ScoreBreakdown(
        relevance_score=round(relevance, 2),
        semantic_score=round(semantic, 2),
        quality_score=round(quality, 2),
        penalty=penalty,
        raw_score=round(raw_score, 2),
        length_cap=cap,
        keyword_penalty=kw_penalty,
        completeness_penalty=completeness_penalty,
        question_answer_similarity=round(topic_similarity, 4),
        reference_similarity=round(reference_similarity, 4),
        keyword_coverage=round(coverage, 4),
    )
    logger.info(
        "Answer scored: final=%d raw=%.1f relevance=%.1f semantic=%.1f quality=%.1f penalty=%.1f "
        "cap=%s keyword_penalty=%.1f completeness_penalty=%.1f",
        final_score,
        raw_score,
        relevance,
        semantic,
        quality,
        penalty,
        cap,
        kw_penalty,
        completeness_penalty,
    )

    # FeedbackGeneration
    feedback = await generate_feedback(question, trimmed, final_score, issues, generator=generator)
    return FeedbackResult(score=final_score, feedback=feedback, issues=issues, breakdown=breakdown)
