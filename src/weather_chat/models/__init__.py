"""Data models for the weather chat pipeline."""

from .memory import ConversationContext, HistoryEntry
from .query import (
    DEFAULT_METRICS,
    MINIMAL_METRICS,
    ComparisonType,
    IntentResult,
    QueryParameters,
    TimeRange,
)
from .session import Session, Turn, TurnRole

__all__ = [
    "ConversationContext",
    "HistoryEntry",
    "ComparisonType",
    "IntentResult",
    "QueryParameters",
    "TimeRange",
    "DEFAULT_METRICS",
    "MINIMAL_METRICS",
    "Session",
    "Turn",
    "TurnRole",
]
