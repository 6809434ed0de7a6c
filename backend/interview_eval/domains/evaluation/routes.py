from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...components.evaluation import service as evaluation_service
from ...components.evaluation.errors import (
    EmptyHistoryError,
    GenerationFailedError,
    RecordNotFoundError,
)
from ...components.feedback.narrative import generate_model_answer
from ...components.integrations.providers import EmbeddingProvider, GenerationProvider
from ...components.scoring.schemas import FeedbackResult, PersistedResult, PersonalAnalysis
from ...deps import get_embedding_provider, get_generation_provider
from ...platform.database import get_db
from ...schemas.evaluation import FeedbackRequest, ModelAnswerRequest, ModelAnswerResponse, ScoreRequest

router = APIRouter(prefix="/evaluation", tags=["Evaluation"])
logger = logging.getLogger(__name__)


def _not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)


def _generation_failed(exc: GenerationFailedError) -> HTTPException:
    logger.error("Generation failed: %s (detail=%s)", exc.message, exc.detail)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)


@router.post("/score", response_model=FeedbackResult)
async def score_answer(
    data: ScoreRequest,
    embedder: EmbeddingProvider = Depends(get_embedding_provider),
    generator: GenerationProvider = Depends(get_generation_provider),
):
    return await evaluation_service.score(data.question, data.answer, embedder=embedder, generator=generator)


@router.patch("/feedback/{history_id}", response_model=PersistedResult)
async def update_feedback(
    history_id: int,
    data: FeedbackRequest,
    db: Session = Depends(get_db),
    embedder: EmbeddingProvider = Depends(get_embedding_provider),
    generator: GenerationProvider = Depends(get_generation_provider),
):
    try:
        return await evaluation_service.score_and_persist(
            db,
            history_id,
            data.question,
            data.answer,
            embedder=embedder,
            generator=generator,
            question_id=data.question_id,
        )
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/feedback/{history_id}", response_model=PersistedResult, status_code=status.HTTP_201_CREATED)
async def regenerate_feedback(
    history_id: int,
    data: FeedbackRequest,
    db: Session = Depends(get_db),
    embedder: EmbeddingProvider = Depends(get_embedding_provider),
    generator: GenerationProvider = Depends(get_generation_provider),
):
    try:
        return await evaluation_service.regenerate_feedback(
            db,
            history_id,
            data.question,
            data.answer,
            embedder=embedder,
            generator=generator,
            question_id=data.question_id,
        )
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/feedback", response_model=ModelAnswerResponse)
async def model_answer(
    data: ModelAnswerRequest,
    generator: GenerationProvider = Depends(get_generation_provider),
):
    try:
        answer = await generate_model_answer(data.question, generator=generator)
    except GenerationFailedError as exc:
        raise _generation_failed(exc) from exc
    return ModelAnswerResponse(question=data.question, answer=answer)


@router.get("/analysis/{user_id}", response_model=PersonalAnalysis)
async def analyze_competency(
    user_id: int,
    db: Session = Depends(get_db),
    generator: GenerationProvider = Depends(get_generation_provider),
):
    try:
        return await evaluation_service.analyze_user_competency(db, user_id, generator=generator)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except EmptyHistoryError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except GenerationFailedError as exc:
        raise _generation_failed(exc) from exc
