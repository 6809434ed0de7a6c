from .user import User
from .history import History, HistoryStatus

__all__ = [
    "User",
    "History",
    "HistoryStatus",
]
