"""Per-session carried state used to resolve follow-up questions."""

import logging
from collections import deque
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models import ConversationContext, HistoryEntry

logger = logging.getLogger(__name__)


class ConversationMemory:
    """Bounded history plus the last location, intent and parameters of a session."""

    def __init__(self, max_history: int = 10, language: str = "vi", units: str = "metric"):
        self.max_history = max_history
        self.history: deque[HistoryEntry] = deque(maxlen=max_history)
        self.last_location: Optional[str] = None
        self.last_time_range: Optional[str] = None
        self.last_intent: Optional[str] = None
        self.last_parameters: Optional[Dict[str, Any]] = None
        self.mentioned_locations: List[str] = []
        self.preferences: Dict[str, str] = {"language": language, "units": units}
        self.created_at = datetime.now()

    def record(
        self,
        user_input: str,
        intent: Optional[str],
        parameters: Optional[Dict[str, Any]],
        ai_response: str,
    ) -> None:
        """Fold one finished exchange into the carried state."""
        parameters = parameters or {}
        self.history.append(
            HistoryEntry(
                user_input=user_input,
                intent=intent,
                parameters=parameters,
                ai_response=ai_response[:200],
            )
        )

        locations = parameters.get("locations") or []
        if locations:
            self.last_location = locations[0]
            for location in locations:
                if location not in self.mentioned_locations:
                    self.mentioned_locations.append(location)

        # Greeting and clarification turns carry no parameters
        if parameters:
            self.last_parameters = parameters
            self.last_time_range = parameters.get("timeRange")
        self.last_intent = intent

    @property
    def is_empty(self) -> bool:
        return not self.history

    def to_context(self, recent: int = 3) -> ConversationContext:
        """Summary view handed to the classifier and extractor."""
        recent_queries = [
            {"input": entry.user_input, "intent": entry.intent}
            for entry in list(self.history)[-recent:]
        ]
        return ConversationContext(
            last_location=self.last_location,
            last_intent=self.last_intent,
            last_parameters=self.last_parameters,
            last_time_range=self.last_time_range,
            mentioned_locations=list(self.mentioned_locations),
            recent_queries=recent_queries,
            language=self.preferences["language"],
        )

    def clear(self) -> None:
        """Reset all carried state, keeping preferences."""
        self.history.clear()
        self.last_location = None
        self.last_time_range = None
        self.last_intent = None
        self.last_parameters = None
        self.mentioned_locations = []

    def get_stats(self) -> Dict[str, Any]:
        return {
            "history_count": len(self.history),
            "max_history": self.max_history,
            "mentioned_locations": len(self.mentioned_locations),
            "created_at": self.created_at.isoformat(),
        }
