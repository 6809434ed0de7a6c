"""Pydantic models describing evaluation inputs and results."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class EvaluationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class CopyDetectionVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_copied: bool
    reason: str = ""
    copy_ratio: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ScoreBreakdown(BaseModel):
    relevance_score: float = 0.0
    semantic_score: float = 0.0
    quality_score: float = 0.0
    penalty: float = 0.0
    raw_score: float = 0.0
    length_cap: Optional[int] = None
    keyword_penalty: float = 0.0
    completeness_penalty: float = 0.0
    question_answer_similarity: float = 0.0
    reference_similarity: float = 0.0
    keyword_coverage: float = 0.0


class NarrativeFeedback(BaseModel):
    good: str
    improvement: str
    recommendation: str


class FeedbackResult(BaseModel):
    score: int = Field(ge=0, le=100)
    feedback: Union[NarrativeFeedback, str]
    issues: List[str] = []
    breakdown: Optional[ScoreBreakdown] = None


class CompetencyScores(BaseModel):
    logical_thinking: int = Field(ge=0, le=10)
    communication: int = Field(ge=0, le=10)
    technical_knowledge: int = Field(ge=0, le=10)
    problem_solving: int = Field(ge=0, le=10)
    attitude: int = Field(ge=0, le=10)
    growth_potential: int = Field(ge=0, le=10)


class PersonalAnalysis(BaseModel):
    scores: CompetencyScores
    strengths: str
    improvements: str
    recommendations: str
    average_score: float = 0.0
    answer_count: int = 0
    low_confidence: bool = False


class PersistedResult(BaseModel):
    history_id: int
    user_id: int
    score: int
    feedback: Union[NarrativeFeedback, str]
    issues: List[str] = []
    total_points: int
