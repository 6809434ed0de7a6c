"""User/history persistence helpers used by the evaluation service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ...models.history import History, HistoryStatus
from ...models.user import User
from .errors import RecordNotFoundError


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise RecordNotFoundError("user", user_id)
    return user


def get_history(db: Session, history_id: int) -> History:
    history = db.get(History, history_id)
    if history is None:
        raise RecordNotFoundError("history", history_id)
    return history


def update_history(history: History, **fields: Any) -> History:
    """Apply ``fields`` to a loaded history record; the caller commits."""
    for key, value in fields.items():
        if not hasattr(History, key):
            raise AttributeError(f"History has no field {key!r}")
        setattr(history, key, value)
    return history


def create_history(db: Session, **fields: Any) -> History:
    history = History(**fields)
    db.add(history)
    db.flush()
    return history


def awarded_points(history: History) -> int:
    """Points a history entry has already contributed to its user."""
    if history.status == HistoryStatus.COMPLETED:
        return int(history.score or 0)
    return 0


def add_points(user: User, points: int) -> int:
    user.points = int(user.points or 0) + int(points)
    return user.points


def recent_completed_history(db: Session, user_id: int, limit: int = 20) -> List[History]:
    """Most recent completed answers first."""
    return (
        db.query(History)
        .filter(
            History.user_id == user_id,
            History.status == HistoryStatus.COMPLETED,
            History.answer.isnot(None),
            History.score.isnot(None),
        )
        .order_by(History.created_at.desc(), History.id.desc())
        .limit(limit)
        .all()
    )


def feedback_payload(feedback: Any) -> Optional[Dict[str, Any] | str]:
    """JSON-safe form of a FeedbackResult.feedback value for storage."""
    if feedback is None or isinstance(feedback, str):
        return feedback
    return feedback.model_dump()
