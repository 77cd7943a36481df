"""Orchestrator sequencing the conversational weather pipeline."""

import asyncio
import logging
import re
import uuid
import weakref
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import PersistenceError, RequestValidationError, WeatherServiceError
from ..models import ConversationContext, IntentResult, QueryParameters, Session, Turn, TurnRole
from ..pipeline import IntentClassifier, ParameterExtractor, ResponseGenerator, fallback_intent
from ..services.cache import ResponseCache
from ..services.session_store import ContextStore
from ..weather.adapter import WeatherAnalysisAdapter
from .intents import Intent

logger = logging.getLogger(__name__)

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

GREETING_WORDS = ("xin chào", "chào bạn", "hello", "hi")
THANKS_WORDS = ("cảm ơn", "cám ơn", "thanks", "thank you")

CANNED_REPLIES = {
    "vi": {
        "greeting": (
            "Xin chào! 👋 Tôi là trợ lý thời tiết AI. Bạn có thể hỏi tôi về thời tiết "
            "ở bất kỳ đâu nhé!\n\nVí dụ:\n• Hôm nay Hà Nội thế nào?\n• Tuần tới có mưa không?\n"
            "• So sánh thời tiết Sài Gòn và Đà Nẵng"
        ),
        "thanks": "Không có gì! 😊 Còn câu hỏi gì về thời tiết không?",
        "intro": (
            "Tôi là trợ lý thời tiết AI, tôi có thể giúp bạn tra cứu thông tin thời tiết. "
            "Bạn muốn biết thời tiết ở đâu? 🌤️"
        ),
        "clarify": "Xin lỗi, tôi chưa hiểu rõ câu hỏi của bạn. ",
        "clarify_location": "Bạn muốn hỏi về thời tiết ở {location} phải không?",
        "clarify_examples": (
            "Bạn có thể hỏi cụ thể hơn được không?\n\nVí dụ:\n• Hôm nay Hà Nội thế nào?\n"
            "• Ngày mai có mưa không?\n• So sánh Sài Gòn và Đà Nẵng"
        ),
        "error": "Xin lỗi, tôi gặp lỗi khi xử lý câu hỏi của bạn. Vui lòng thử lại sau.",
    },
    "en": {
        "greeting": (
            "Hello! 👋 I'm an AI weather assistant. Ask me about the weather anywhere!\n\n"
            "For example:\n• How is Hanoi today?\n• Will it rain next week?\n"
            "• Compare the weather in Saigon and Da Nang"
        ),
        "thanks": "You're welcome! 😊 Any other weather questions?",
        "intro": (
            "I'm an AI weather assistant and can look up weather information for you. "
            "Which place would you like to know about? 🌤️"
        ),
        "clarify": "Sorry, I didn't quite understand your question. ",
        "clarify_location": "Are you asking about the weather in {location}?",
        "clarify_examples": (
            "Could you be more specific?\n\nFor example:\n• How is Hanoi today?\n"
            "• Will it rain tomorrow?\n• Compare Saigon and Da Nang"
        ),
        "error": (
            "Sorry, I ran into an error while processing your question. Please try again later."
        ),
    },
}


@dataclass
class ChatResult:
    """Outcome of one handled message."""

    reply: str
    session_id: str
    intent: IntentResult
    parameters: Optional[QueryParameters] = None
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "reply": self.reply,
            "intent": self.intent.to_dict(),
            "parameters": self.parameters.to_dict() if self.parameters else None,
        }


class ConversationOrchestrator:
    """Runs ensure-session, classify, extract, analyze, generate and persist per message."""

    def __init__(
        self,
        store: ContextStore,
        classifier: IntentClassifier,
        extractor: ParameterExtractor,
        generator: ResponseGenerator,
        weather: WeatherAnalysisAdapter,
        cache: Optional[ResponseCache] = None,
        model_manager: Any = None,
    ):
        self.store = store
        self.classifier = classifier
        self.extractor = extractor
        self.generator = generator
        self.weather = weather
        self.cache = cache or ResponseCache()
        self.model_manager = model_manager
        # Entries vanish once no task holds or waits on the lock
        self._session_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

        self.messages_handled = 0
        self.degraded_replies = 0
        self.persistence_failures = 0

    @staticmethod
    def resolve_session_id(session_id: Optional[str]) -> str:
        """Keep a well-formed caller id, otherwise mint a new one."""
        if session_id is not None:
            session_id = session_id.strip()
            if _SESSION_ID_PATTERN.match(session_id):
                return session_id
            if session_id:
                logger.warning(f"Invalid session id received: {session_id[:80]!r}, generating new id")
        return str(uuid.uuid4())

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        return lock

    async def handle_message(
        self,
        text: str,
        session_id: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> ChatResult:
        """Process one user message and always return a reply.

        Raises:
            RequestValidationError: If the message is empty.
        """
        if not isinstance(text, str) or not text.strip():
            raise RequestValidationError("Message is required")
        text = text.strip()
        session_id = self.resolve_session_id(session_id)

        # Messages on one session are processed one at a time to keep turn order
        async with self._lock_for(session_id):
            result = await self._run_pipeline(text, session_id, owner_id)
            try:
                await self._persist(result, text)
            except PersistenceError as e:
                self.persistence_failures += 1
                logger.error(f"{e}: {e.__cause__}", exc_info=True)

        self.messages_handled += 1
        if result.degraded:
            self.degraded_replies += 1
        return result

    async def _run_pipeline(
        self, text: str, session_id: str, owner_id: Optional[str]
    ) -> ChatResult:
        intent = fallback_intent()
        language = getattr(self.store, "default_language", "vi")

        try:
            await self.store.get_or_create(session_id, owner_id)
            context = await self._load_context(session_id)
            language = context.language

            logger.info(f"Processing message for session {session_id}")
            intent = await self.classifier.classify(text, context)

            if intent.intent == Intent.GENERAL_CHAT.value:
                return ChatResult(self._general_chat_reply(text, language), session_id, intent)
            if intent.intent == Intent.CLARIFICATION.value and intent.confidence < 0.5:
                return ChatResult(
                    self._clarification_reply(context, language), session_id, intent
                )

            parameters = await self.extractor.extract(text, intent.intent, context)
            analysis = await self._fetch_analysis(intent.intent, parameters)
            reply = await self.generator.generate(
                text, intent.intent, parameters, analysis, language
            )
            return ChatResult(reply, session_id, intent, parameters)

        except Exception as e:
            logger.error(f"Pipeline failed for session {session_id}: {e}", exc_info=True)
            replies = CANNED_REPLIES.get(language, CANNED_REPLIES["en"])
            return ChatResult(
                replies["error"],
                session_id,
                intent,
                degraded=True,
            )

    async def _load_context(self, session_id: str) -> ConversationContext:
        try:
            return await self.store.get_context(session_id)
        except Exception as e:
            logger.warning(f"Could not load context for {session_id}: {e}")
            return ConversationContext()

    async def _fetch_analysis(self, intent: str, parameters: QueryParameters) -> Any:
        """Ask the weather service, serving repeated queries from cache."""
        cache_key = self.cache.create_key(intent, parameters.to_dict())
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Analysis cache hit for {intent}")
            return cached

        try:
            analysis = await self.weather.analyze(intent, parameters)
        except Exception as e:
            logger.warning(
                f"Weather analysis unavailable: {type(e).__name__}: {e}",
                exc_info=not isinstance(e, WeatherServiceError),
            )
            # Only our own service errors carry text fit for the reply
            message = str(e) if isinstance(e, WeatherServiceError) else "Weather data unavailable"
            return {"error": message, "locations": list(parameters.locations)}

        if not (isinstance(analysis, dict) and analysis.get("error")):
            self.cache.set(cache_key, analysis)
        return analysis

    async def _persist(self, result: ChatResult, text: str) -> None:
        """Write the user turn then the assistant turn.

        Raises:
            PersistenceError: If the store rejects any write.
        """
        session_id = result.session_id
        try:
            await self.store.append_turn(session_id, TurnRole.USER, text)
            await self.store.append_turn(session_id, TurnRole.ASSISTANT, result.reply)
            parameters = result.parameters.to_dict() if result.parameters else {}
            await self.store.record_exchange(
                session_id, text, result.intent.intent, parameters, result.reply
            )
        except Exception as e:
            raise PersistenceError(f"Failed to persist turn for session {session_id}") from e

    def _general_chat_reply(self, text: str, language: str) -> str:
        replies = CANNED_REPLIES.get(language, CANNED_REPLIES["en"])
        # Whole-word match so "hi" does not fire on "chi tiết"
        padded = " " + " ".join(re.findall(r"\w+", text.lower())) + " "
        if any(f" {word} " in padded for word in GREETING_WORDS):
            return replies["greeting"]
        if any(f" {word} " in padded for word in THANKS_WORDS):
            return replies["thanks"]
        return replies["intro"]

    def _clarification_reply(self, context: ConversationContext, language: str) -> str:
        replies = CANNED_REPLIES.get(language, CANNED_REPLIES["en"])
        if context.last_location:
            return replies["clarify"] + replies["clarify_location"].format(
                location=context.last_location
            )
        return replies["clarify"] + replies["clarify_examples"]

    # Session management, exposed so callers never touch the store directly

    async def create_session(self, owner_id: Optional[str] = None) -> Session:
        return await self.store.get_or_create(self.resolve_session_id(None), owner_id)

    async def list_sessions(self, owner_id: str) -> List[Session]:
        return await self.store.list_by_owner(owner_id)

    async def list_turns(self, session_id: str) -> List[Turn]:
        return await self.store.list_turns(session_id)

    async def get_context(self, session_id: str) -> ConversationContext:
        return await self.store.get_context(session_id)

    async def clear_context(self, session_id: str) -> bool:
        async with self._lock_for(session_id):
            return await self.store.clear(session_id)

    async def delete_session(self, session_id: str) -> bool:
        async with self._lock_for(session_id):
            return await self.store.delete_session(session_id)

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about handled messages."""
        stats: Dict[str, Any] = {
            "messages_handled": self.messages_handled,
            "degraded_replies": self.degraded_replies,
            "persistence_failures": self.persistence_failures,
            "cache_stats": self.cache.get_stats(),
        }
        if hasattr(self.store, "get_stats"):
            stats["store_stats"] = self.store.get_stats()
        if self.model_manager is not None:
            stats["model_stats"] = self.model_manager.get_stats()
        return stats
