from .evaluation import FeedbackRequest, ModelAnswerRequest, ModelAnswerResponse, ScoreRequest

__all__ = [
    "FeedbackRequest",
    "ModelAnswerRequest",
    "ModelAnswerResponse",
    "ScoreRequest",
]
