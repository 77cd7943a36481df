"""Service components for the weather chat pipeline."""

from .cache import ResponseCache
from .memory import ConversationMemory
from .session_store import ContextStore, InMemoryContextStore

__all__ = [
    "ContextStore",
    "ConversationMemory",
    "InMemoryContextStore",
    "ResponseCache",
]
