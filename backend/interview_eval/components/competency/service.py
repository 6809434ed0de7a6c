"""Six-axis competency analysis over a user's recent answer history.

A single generation call reads every Q/A pair plus aggregate stats and
returns axis scores and prose. Scores are never trusted as typed: each one
is coerced and clamped to 0-10 after parsing. There is no numeric fallback;
exhausted retries raise ``CompetencyAnalysisError``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ...platform.config import settings
from ..evaluation.errors import CompetencyAnalysisError, EmptyHistoryError
from ..feedback.json_output import Parsed, ParseFailure, ParseResult, extract_json_object, require_text_fields
from ..feedback.retry import generate_with_retry
from ..integrations.providers import GenerationOptions, GenerationProvider
from ..scoring.schemas import CompetencyScores, PersonalAnalysis
from ..scoring.scoring_core import round_half_up

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_THRESHOLD = 3
_ANSWER_PREVIEW_CHARS = 600

COMPETENCY_AXES = (
    "logical_thinking",
    "communication",
    "technical_knowledge",
    "problem_solving",
    "attitude",
    "growth_potential",
)
TEXT_FIELDS = ("strengths", "improvements", "recommendations")

ANALYSIS_OPTIONS = GenerationOptions(temperature=0.3, max_output_tokens=2048, response_format="json")

COMPETENCY_RUBRIC = """평가 기준 (각 항목 0-10점, 정수):
- logical_thinking (논리적 사고): 주장과 근거의 연결, 답변 구조의 일관성
- communication (의사소통): 질문 의도 파악, 명확하고 간결한 표현
- technical_knowledge (기술 지식): 개념의 정확성과 깊이
- problem_solving (문제 해결): 상황 분석, 대안 제시, 트레이드오프 인식
- attitude (태도): 성실성, 책임감, 협업에 대한 태도
- growth_potential (성장 가능성): 학습 의지, 경험에서 배운 점의 구체성

점수 구간:
- 0-2 (매우 부족): 답변이 없거나 질문과 무관함, 개념 오류가 반복됨
- 3-4 (부족): 기본 개념만 언급하고 설명이나 근거가 거의 없음
- 5-6 (보통): 핵심 개념을 설명하지만 예시나 깊이가 부족함
- 7-8 (우수): 정확한 설명과 구체적인 예시, 근거가 함께 제시됨
- 9-10 (탁월): 깊이 있는 이해, 실무 경험 기반의 통찰, 대안과 한계까지 논의함

규칙:
1) 답변에서 확인되는 근거만으로 평가하고 추측하지 마세요.
2) 평균 점수가 낮거나 답변 수가 적으면 높은 점수를 주지 마세요.
3) 모든 항목을 독립적으로 평가하세요.
"""

COMPETENCY_PROMPT = """당신은 기술 면접 평가 전문가입니다. 아래는 한 지원자의 최근 면접 답변 기록입니다.

답변 수: {answer_count}
평균 점수: {average_score}/100
{low_confidence_note}
답변 기록 (최신순):
{records_section}

{rubric}
다음 JSON 형식으로만 응답하세요 (마크다운, 설명 없이 유효한 JSON만):
{{
    "scores": {{
        "logical_thinking": <0-10>,
        "communication": <0-10>,
        "technical_knowledge": <0-10>,
        "problem_solving": <0-10>,
        "attitude": <0-10>,
        "growth_potential": <0-10>
    }},
    "strengths": "강점 (2-3문장)",
    "improvements": "개선점 (2-3문장)",
    "recommendations": "추천 학습 방향 (2-3문장)"
}}
"""


@dataclass(frozen=True)
class AnsweredRecord:
    question: str
    answer: str
    score: int


def clamp_competency(value: Any) -> Optional[int]:
    """Coerce a model-provided axis score to an int in [0, 10]; None if not numeric."""
    if isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(numeric):
        return None
    return round_half_up(max(0.0, min(10.0, numeric)))


def _records_section(records: Sequence[AnsweredRecord]) -> str:
    lines = []
    for i, record in enumerate(records, start=1):
        answer = (record.answer or "").strip()[:_ANSWER_PREVIEW_CHARS]
        lines.append(f"[{i}] 질문: {record.question.strip()}\n    답변: {answer}\n    점수: {record.score}")
    return "\n".join(lines)


def build_competency_prompt(records: Sequence[AnsweredRecord], average_score: float, low_confidence: bool) -> str:
    note = (
        "주의: 답변 수가 적어 평가 신뢰도가 낮습니다. 점수를 보수적으로 매기세요.\n"
        if low_confidence
        else ""
    )
    return COMPETENCY_PROMPT.format(
        answer_count=len(records),
        average_score=average_score,
        low_confidence_note=note,
        records_section=_records_section(records),
        rubric=COMPETENCY_RUBRIC,
    )


def parse_competency(raw: str) -> ParseResult:
    extracted = extract_json_object(raw, ("scores",) + TEXT_FIELDS)
    if isinstance(extracted, ParseFailure):
        return extracted

    checked = require_text_fields(extracted.data, TEXT_FIELDS)
    if isinstance(checked, ParseFailure):
        return checked
    data = checked.data

    raw_scores = data.get("scores")
    if not isinstance(raw_scores, dict):
        return ParseFailure("scores is not an object", raw)

    scores: Dict[str, int] = {}
    for axis in COMPETENCY_AXES:
        value = clamp_competency(raw_scores.get(axis))
        if value is None:
            return ParseFailure(f"missing or non-numeric score: {axis}", raw)
        scores[axis] = value

    data["scores"] = scores
    return Parsed(data)


async def analyze_competency(
    records: Sequence[AnsweredRecord],
    *,
    generator: GenerationProvider,
    max_retries: int | None = None,
) -> PersonalAnalysis:
    if not records:
        raise EmptyHistoryError("분석할 답변 기록이 없습니다.")

    recent: List[AnsweredRecord] = list(records)[: settings.COMPETENCY_HISTORY_LIMIT]
    average_score = round(sum(r.score for r in recent) / len(recent), 1)
    low_confidence = len(recent) < LOW_CONFIDENCE_THRESHOLD

    logger.info(
        "Running competency analysis (records=%d, average=%.1f, low_confidence=%s)",
        len(recent),
        average_score,
        low_confidence,
    )
    outcome = await generate_with_retry(
        generator,
        build_competency_prompt(recent, average_score, low_confidence),
        ANALYSIS_OPTIONS,
        parse_competency,
        max_retries=settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries,
        delay_seconds=settings.GENERATION_RETRY_DELAY_SECONDS,
        timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        label="competency_analysis",
    )
    if not outcome.ok:
        raise CompetencyAnalysisError(
            "역량 분석을 생성하지 못했습니다. 잠시 후 다시 시도해주세요.",
            detail=outcome.last_error,
        )

    data = outcome.value
    return PersonalAnalysis(
        scores=CompetencyScores(**data["scores"]),
        strengths=data["strengths"],
        improvements=data["improvements"],
        recommendations=data["recommendations"],
        average_score=average_score,
        answer_count=len(recent),
        low_confidence=low_confidence,
    )
