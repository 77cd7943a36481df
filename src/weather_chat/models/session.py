"""Session and turn models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TurnRole(str, Enum):
    """Author of a turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """A single persisted message in a session."""

    role: TurnRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.timestamp.isoformat(),
        }


@dataclass
class Session:
    """A conversation thread, optionally tied to an owner."""

    session_id: str
    owner_id: Optional[str] = None
    turns: List[Turn] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_anonymous(self) -> bool:
        return self.owner_id is None

    @property
    def title(self) -> str:
        """First user message, truncated, used as the session title."""
        for turn in self.turns:
            if turn.role is TurnRole.USER:
                return turn.content[:50]
        return "New Chat"

    def to_summary(self) -> Dict[str, Any]:
        """Listing view of the session."""
        return {
            "id": self.session_id,
            "title": self.title,
            "messageCount": len(self.turns),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "isAnonymous": self.is_anonymous,
        }
