"""Weather Chat - conversational weather queries over a text-generation model"""

__version__ = "1.0.0"

from .core.orchestrator import ChatResult, ConversationOrchestrator  # noqa: E402

__all__ = ["ChatResult", "ConversationOrchestrator"]
