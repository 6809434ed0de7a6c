"""Narrative feedback and model-answer generation.

Failure policy: when every attempt fails, ``generate_feedback`` returns the
fixed ``FALLBACK_FEEDBACK`` triple. It never surfaces raw model output.
``generate_model_answer`` has no meaningful fallback and raises instead.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from ...platform.config import settings
from ..evaluation.errors import GenerationFailedError
from ..integrations.providers import GenerationOptions, GenerationProvider
from ..scoring.schemas import NarrativeFeedback
from .json_output import Parsed, ParseFailure, ParseResult, extract_json_object, require_text_fields
from .retry import generate_with_retry

logger = logging.getLogger(__name__)

FEEDBACK_FIELDS = ("good", "improvement", "recommendation")

FALLBACK_FEEDBACK = NarrativeFeedback(
    good="질문에 답변하려는 시도가 확인되었습니다.",
    improvement="질문의 핵심 개념을 중심으로 답변을 더 구체적으로 구성해보세요.",
    recommendation="관련 개념을 정리한 뒤 실제 사례나 경험을 들어 다시 답변해보세요.",
)

FEEDBACK_OPTIONS = GenerationOptions(temperature=0.7, max_output_tokens=1024, response_format="json")
MODEL_ANSWER_OPTIONS = GenerationOptions(temperature=0.7, max_output_tokens=1024)

FEEDBACK_PROMPT = """당신은 기술 면접관입니다. 아래 면접 질문과 지원자의 답변을 평가한 피드백을 작성하세요.

질문:
{question}

답변:
{answer}

자동 평가 점수: {score}/100
감지된 문제점:
{issues_section}

다음 JSON 형식으로만 응답하세요 (마크다운, 설명 없이 유효한 JSON만):
{{
    "good": "답변에서 잘한 점 (1-2문장)",
    "improvement": "개선이 필요한 점 (1-2문장)",
    "recommendation": "다음 답변을 위한 구체적인 추천 (1-2문장)"
}}

규칙:
1) 세 필드 모두 비워두지 말고 한국어로 작성하세요.
2) 점수와 문제점을 고려하되 점수를 다시 언급하지 마세요.
3) 답변에 없는 내용을 지어내지 마세요.
"""

MODEL_ANSWER_PROMPT = """당신은 숙련된 개발자이자 면접 코치입니다.
아래 면접 질문에 대한 모범 답변을 한국어로 작성하세요.

질문:
{question}

규칙:
1) 핵심 개념을 먼저 정의하고, 예시나 실제 경험을 한 가지 이상 포함하세요.
2) 3-6문장, 면접에서 말로 답하는 어조로 작성하세요.
3) 답변 본문만 출력하세요.
"""


def _issues_section(issues: Sequence[str]) -> str:
    if not issues:
        return "- 없음"
    return "\n".join(f"- {issue}" for issue in issues)


def parse_feedback(raw: str) -> ParseResult:
    extracted = extract_json_object(raw, FEEDBACK_FIELDS)
    if isinstance(extracted, ParseFailure):
        return extracted
    return require_text_fields(extracted.data, FEEDBACK_FIELDS)


async def generate_feedback(
    question: str,
    answer: str,
    score: int,
    issues: List[str],
    *,
    generator: GenerationProvider,
    max_retries: int | None = None,
) -> NarrativeFeedback:
    prompt = FEEDBACK_PROMPT.format(
        question=question.strip(),
        answer=answer.strip(),
        score=score,
        issues_section=_issues_section(issues),
    )
    outcome = await generate_with_retry(
        generator,
        prompt,
        FEEDBACK_OPTIONS,
        parse_feedback,
        max_retries=settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries,
        delay_seconds=settings.GENERATION_RETRY_DELAY_SECONDS,
        timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        label="narrative_feedback",
    )
    if not outcome.ok:
        logger.warning(
            "Using fallback feedback after %d attempts (last_error=%s)",
            outcome.attempts,
            outcome.last_error,
        )
        return FALLBACK_FEEDBACK.model_copy()

    data = outcome.value
    return NarrativeFeedback(**{name: data[name] for name in FEEDBACK_FIELDS})


def _parse_model_answer(raw: str) -> ParseResult:
    text = (raw or "").strip()
    if not text:
        return ParseFailure("empty model answer", raw or "")
    return Parsed({"answer": text})


async def generate_model_answer(
    question: str,
    *,
    generator: GenerationProvider,
    max_retries: int | None = None,
) -> str:
    """Exemplary answer to ``question``; raises GenerationFailedError on exhaustion."""
    outcome = await generate_with_retry(
        generator,
        MODEL_ANSWER_PROMPT.format(question=question.strip()),
        MODEL_ANSWER_OPTIONS,
        _parse_model_answer,
        max_retries=settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries,
        delay_seconds=settings.GENERATION_RETRY_DELAY_SECONDS,
        timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        label="model_answer",
    )
    if not outcome.ok:
        raise GenerationFailedError(
            "모범 답변을 생성하지 못했습니다. 잠시 후 다시 시도해주세요.",
            detail=outcome.last_error,
        )
    return outcome.value["answer"]
