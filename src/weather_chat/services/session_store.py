"""Session store: sessions, their turn logs and derived conversation context."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import SessionNotFoundError
from ..models import ConversationContext, Session, Turn, TurnRole
from .memory import ConversationMemory

logger = logging.getLogger(__name__)


class ContextStore(ABC):
    """Persistence contract for sessions and their conversational state."""

    @abstractmethod
    async def get_or_create(self, session_id: str, owner_id: Optional[str] = None) -> Session:
        """Return the session for session_id, creating it if needed.

        At most one session is ever created per id, even under concurrent calls.
        The session is anonymous iff owner_id is None.
        """
        ...

    @abstractmethod
    async def get_session(self, session_id: str) -> Session:
        """Return an existing session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        ...

    @abstractmethod
    async def append_turn(self, session_id: str, role: TurnRole, text: str) -> Turn:
        """Append an immutable turn.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        ...

    @abstractmethod
    async def list_turns(self, session_id: str) -> List[Turn]:
        """Return the turns of a session in insertion order.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        ...

    @abstractmethod
    async def record_exchange(
        self,
        session_id: str,
        user_input: str,
        intent: Optional[str],
        parameters: Optional[Dict[str, Any]],
        reply: str,
    ) -> None:
        """Update the derived context after a finished exchange."""
        ...

    @abstractmethod
    async def get_context(self, session_id: str) -> ConversationContext:
        """Derived context; empty for unknown sessions or sessions without turns."""
        ...

    @abstractmethod
    async def clear(self, session_id: str) -> bool:
        """Drop all turns and derived context.

        Anonymous sessions are removed entirely; owned sessions keep their record.
        Returns True if the session existed.
        """
        ...

    @abstractmethod
    async def delete_session(self, session_id: str) -> bool:
        """Delete a session and its turns. Returns True if it existed."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[Session]:
        """Sessions of an owner, most recently updated first."""
        ...


class InMemoryContextStore(ContextStore):
    """Process-local ContextStore."""

    def __init__(self, max_history: int = 10, default_language: str = "vi"):
        self.sessions: Dict[str, Session] = {}
        self.memories: Dict[str, ConversationMemory] = {}
        self.max_history = max_history
        self.default_language = default_language
        self._lock = asyncio.Lock()

    async def get_or_create(self, session_id: str, owner_id: Optional[str] = None) -> Session:
        async with self._lock:
            session = self.sessions.get(session_id)
            if session is not None:
                return session

            session = Session(session_id=session_id, owner_id=owner_id)
            self.sessions[session_id] = session
            self.memories[session_id] = self._new_memory()
            kind = "anonymous" if owner_id is None else f"owner {owner_id}"
            logger.info(f"Created session {session_id} ({kind})")
            return session

    async def get_session(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def append_turn(self, session_id: str, role: TurnRole, text: str) -> Turn:
        session = await self.get_session(session_id)
        turn = Turn(role=TurnRole(role), content=text)
        session.turns.append(turn)
        session.updated_at = turn.timestamp
        return turn

    async def list_turns(self, session_id: str) -> List[Turn]:
        session = await self.get_session(session_id)
        return list(session.turns)

    async def record_exchange(
        self,
        session_id: str,
        user_input: str,
        intent: Optional[str],
        parameters: Optional[Dict[str, Any]],
        reply: str,
    ) -> None:
        if session_id not in self.sessions:
            raise SessionNotFoundError(session_id)
        memory = self.memories.setdefault(session_id, self._new_memory())
        memory.record(user_input, intent, parameters, reply)

    async def get_context(self, session_id: str) -> ConversationContext:
        memory = self.memories.get(session_id)
        if memory is None:
            return ConversationContext(language=self.default_language)
        return memory.to_context()

    async def clear(self, session_id: str) -> bool:
        async with self._lock:
            session = self.sessions.get(session_id)
            if session is None:
                return False

            if session.owner_id is None:
                del self.sessions[session_id]
                self.memories.pop(session_id, None)
                logger.info(f"Cleared and removed anonymous session {session_id}")
            else:
                session.turns.clear()
                session.updated_at = datetime.now()
                self.memories[session_id] = self._new_memory()
                logger.info(f"Cleared session {session_id}")
            return True

    async def delete_session(self, session_id: str) -> bool:
        async with self._lock:
            if self.sessions.pop(session_id, None) is None:
                return False
            self.memories.pop(session_id, None)
            logger.info(f"Deleted session {session_id}")
            return True

    async def list_by_owner(self, owner_id: str) -> List[Session]:
        owned = [s for s in self.sessions.values() if s.owner_id == owner_id]
        return sorted(owned, key=lambda s: s.updated_at, reverse=True)

    def _new_memory(self) -> ConversationMemory:
        return ConversationMemory(max_history=self.max_history, language=self.default_language)

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        return {
            "active_sessions": len(self.sessions),
            "anonymous_sessions": sum(1 for s in self.sessions.values() if s.is_anonymous),
            "total_turns": sum(len(s.turns) for s in self.sessions.values()),
            "max_history": self.max_history,
        }
