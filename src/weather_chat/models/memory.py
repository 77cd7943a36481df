"""Conversation memory models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class HistoryEntry:
    """One processed exchange kept in a session's carried state."""

    user_input: str
    intent: Optional[str]
    parameters: Dict[str, Any]
    ai_response: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ConversationContext:
    """Derived view of a session used to resolve elliptical follow-ups."""

    last_location: Optional[str] = None
    last_intent: Optional[str] = None
    last_parameters: Optional[Dict[str, Any]] = None
    last_time_range: Optional[str] = None
    mentioned_locations: List[str] = field(default_factory=list)
    recent_queries: List[Dict[str, Optional[str]]] = field(default_factory=list)
    language: str = "vi"

    @property
    def is_empty(self) -> bool:
        return (
            self.last_location is None
            and self.last_intent is None
            and self.last_parameters is None
            and not self.recent_queries
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastLocation": self.last_location,
            "lastIntent": self.last_intent,
            "lastParameters": self.last_parameters,
            "lastTimeRange": self.last_time_range,
            "mentionedLocations": list(self.mentioned_locations),
            "recentQueries": list(self.recent_queries),
            "language": self.language,
        }
