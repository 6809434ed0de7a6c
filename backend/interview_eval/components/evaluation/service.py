"""Evaluation use cases that combine scoring with user/history persistence."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models.history import HistoryStatus
from ...platform.config import settings
from ..competency.service import AnsweredRecord, analyze_competency
from ..integrations.providers import EmbeddingProvider, GenerationProvider
from ..scoring.schemas import FeedbackResult, PersistedResult, PersonalAnalysis
from ..scoring.service import score_answer
from . import repository

logger = logging.getLogger(__name__)


async def score(
    question: str,
    answer: str,
    *,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
) -> FeedbackResult:
    return await score_answer(question, answer, embedder=embedder, generator=generator)


async def score_and_persist(
    db: Session,
    history_id: int,
    question: str,
    answer: str,
    *,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
    question_id: Optional[int] = None,
) -> PersistedResult:
    """Score an answer and record it on an existing history entry.

    The history update and the user's point increment are committed in the
    same transaction. Re-scoring a completed entry replaces its points
    instead of adding them a second time.
    """
    history = repository.get_history(db, history_id)
    user = repository.get_user(db, history.user_id)

    result = await score_answer(question, answer, embedder=embedder, generator=generator)

    earned = result.score - repository.awarded_points(history)
    if question_id is None:
        question_id = history.question_id

    try:
        repository.update_history(
            history,
            question_id=question_id,
            question=question,
            answer=answer,
            score=result.score,
            feedback=repository.feedback_payload(result.feedback),
            issues=list(result.issues),
            status=HistoryStatus.COMPLETED,
        )
        total_points = repository.add_points(user, earned)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to persist evaluation (history_id=%d)", history_id)
        raise

    logger.info(
        "Evaluation persisted (history_id=%d, user_id=%d, score=%d, total_points=%d)",
        history.id,
        user.id,
        result.score,
        total_points,
    )
    return PersistedResult(
        history_id=history.id,
        user_id=user.id,
        score=result.score,
        feedback=result.feedback,
        issues=result.issues,
        total_points=total_points,
    )


async def regenerate_feedback(
    db: Session,
    history_id: int,
    question: str,
    answer: str,
    *,
    embedder: EmbeddingProvider,
    generator: GenerationProvider,
    question_id: Optional[int] = None,
) -> PersistedResult:
    """Score a new attempt at the question of ``history_id`` as a new history entry."""
    source = repository.get_history(db, history_id)
    user = repository.get_user(db, source.user_id)

    result = await score_answer(question, answer, embedder=embedder, generator=generator)

    try:
        created = repository.create_history(
            db,
            user_id=user.id,
            question_id=question_id if question_id is not None else source.question_id,
            question=question,
            answer=answer,
            score=result.score,
            feedback=repository.feedback_payload(result.feedback),
            issues=list(result.issues),
            status=HistoryStatus.COMPLETED,
        )
        total_points = repository.add_points(user, result.score)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to persist regenerated evaluation (source_history_id=%d)", history_id)
        raise

    logger.info(
        "Regenerated evaluation persisted (source_history_id=%d, history_id=%d, score=%d)",
        history_id,
        created.id,
        result.score,
    )
    return PersistedResult(
        history_id=created.id,
        user_id=user.id,
        score=result.score,
        feedback=result.feedback,
        issues=result.issues,
        total_points=total_points,
    )


async def analyze_user_competency(
    db: Session,
    user_id: int,
    *,
    generator: GenerationProvider,
) -> PersonalAnalysis:
    repository.get_user(db, user_id)
    histories = repository.recent_completed_history(db, user_id, limit=settings.COMPETENCY_HISTORY_LIMIT)
    records = [
        AnsweredRecord(question=h.question, answer=h.answer or "", score=int(h.score or 0))
        for h in histories
    ]
    return await analyze_competency(records, generator=generator)
