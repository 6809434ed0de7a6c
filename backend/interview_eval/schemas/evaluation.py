from typing import Optional
from pydantic import BaseModel, Field


class ScoreRequest(BaseModel):
    question: str = Field(min_length=1, max_length=2000)
    answer: str = Field(max_length=10000)


class FeedbackRequest(BaseModel):
    question_id: Optional[int] = None
    question: str = Field(min_length=1, max_length=2000)
    answer: str = Field(max_length=10000)


class ModelAnswerRequest(BaseModel):
    question: str = Field(min_length=1, max_length=2000)


class ModelAnswerResponse(BaseModel):
    question: str
    answer: str
