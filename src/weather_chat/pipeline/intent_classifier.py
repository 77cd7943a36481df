"""Intent classification stage."""

import logging
import math
from typing import Optional

from ..core.intents import Intent, describe_intents, parse_intent
from ..core.json_payload import coerce_flag, parse_model_json, to_pretty_json
from ..models import ConversationContext, IntentResult

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.3
FALLBACK_REASONING = "Unable to classify intent"


def fallback_intent() -> IntentResult:
    """Result used whenever classification cannot be trusted."""
    return IntentResult(
        intent=Intent.CLARIFICATION.value,
        confidence=FALLBACK_CONFIDENCE,
        reasoning=FALLBACK_REASONING,
        requires_context=True,
    )


class IntentClassifier:
    """Maps an utterance plus conversation context onto the intent taxonomy."""

    def __init__(self, model_manager):
        self.model_manager = model_manager

    async def classify(
        self, user_input: str, context: Optional[ConversationContext] = None
    ) -> IntentResult:
        """Classify the utterance. Never raises; degrades to CLARIFICATION."""
        context = context or ConversationContext()
        prompt = self.build_prompt(user_input, context)

        try:
            text = await self.model_manager.generate_content(prompt, temperature=0.2)
            payload = parse_model_json(text, required=("intent",))
        except Exception as e:
            logger.warning(f"Intent classification degraded: {type(e).__name__}: {e}")
            return fallback_intent()

        intent = parse_intent(payload.get("intent"))
        if intent is None:
            logger.warning(f"Model returned unknown intent: {payload.get('intent')!r}")
            return fallback_intent()

        try:
            confidence = float(payload.get("confidence", 0.5))
        except (TypeError, ValueError):
            logger.warning(f"Model returned non-numeric confidence: {payload.get('confidence')!r}")
            return fallback_intent()

        if not math.isfinite(confidence):
            logger.warning(f"Model returned non-finite confidence: {confidence}")
            return fallback_intent()

        result = IntentResult(
            intent=intent.value,
            confidence=min(max(confidence, 0.0), 1.0),
            reasoning=str(payload.get("reasoning") or ""),
            requires_context=coerce_flag(payload.get("requiresContext")),
        )
        logger.info(f"Classified intent {result.intent} ({result.confidence:.2f})")
        return result

    def build_prompt(self, user_input: str, context: ConversationContext) -> str:
        return f"""You are an intent classification expert for a weather application.

AVAILABLE INTENTS:
{describe_intents()}

CONVERSATION CONTEXT:
{to_pretty_json(context.to_dict())}

USER INPUT: "{user_input}"

TASK:
1. Classify the user's intent into ONE of the intents above
2. Consider the conversation context if the question is ambiguous
3. Rate your confidence (0.0 to 1.0)
4. Explain your reasoning

RESPOND IN JSON FORMAT ONLY:
{{
  "intent": "INTENT_NAME",
  "confidence": 0.95,
  "reasoning": "Brief explanation",
  "requiresContext": false
}}"""
