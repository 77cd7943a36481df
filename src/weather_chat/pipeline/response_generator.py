"""Natural-language reply generation stage."""

import logging
from typing import Any

from ..core.intents import Intent
from ..core.json_payload import to_pretty_json
from ..models import QueryParameters

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {"vi": "Vietnamese", "en": "English"}

FALLBACK_LABELS = {"vi": "Dữ liệu thời tiết:", "en": "Weather data:"}

INTENT_GUIDANCE = {
    Intent.CURRENT_WEATHER: (
        "- State current conditions clearly\n"
        '- Mention "feels like" temperature if different\n'
        "- Add comfort assessment\n"
        '- Brief advice (e.g., "Nên mang ô" if raining)'
    ),
    Intent.FORECAST: (
        "- Summarize forecast period\n"
        "- Highlight notable days (hottest, rainiest, etc.)\n"
        "- Give planning advice"
    ),
    Intent.HISTORICAL_QUERY: (
        "- Summarize what the weather was like in the period\n"
        "- Mention notable days"
    ),
    Intent.COMPARISON: (
        "- Clear comparison with numbers\n"
        "- State which is better/worse for what\n"
        '- Use "vs" or comparison language'
    ),
    Intent.TREND_ANALYSIS: (
        "- Describe the pattern (increasing/decreasing/stable)\n"
        "- Quantify the change\n"
        "- Explain what it means"
    ),
    Intent.EXTREME_EVENTS: (
        "- Highlight the extreme day/value\n- Compare with normal\n- Add context"
    ),
    Intent.STATISTICAL_INFO: (
        "- Present stats clearly with labels\n"
        "- Use bullet points if multiple stats\n"
        "- Add interpretation"
    ),
    Intent.RECOMMENDATION: (
        "- Give clear yes/no answer first\n"
        "- Explain reasoning based on weather\n"
        "- Suggest alternatives if weather is bad"
    ),
    Intent.HEALTH_SAFETY: (
        "- Lead with the health-relevant metric (UV, air quality, heat)\n"
        "- Say plainly whether it is safe and for whom"
    ),
    Intent.PLANNING: (
        "- Name the best day(s) first\n- Explain why using the forecast"
    ),
    Intent.MULTI_LOCATION: (
        "- One short line per location\n- Use bullet points"
    ),
}

DEFAULT_GUIDANCE = "- Answer the question directly using the weather analysis"


def fallback_reply(analysis: Any, language: str) -> str:
    """Verbatim analysis dump used when generation fails."""
    label = FALLBACK_LABELS["vi"] if language == "vi" else FALLBACK_LABELS["en"]
    return f"{label}\n{to_pretty_json(analysis)}"


class ResponseGenerator:
    """Renders the analysis into a short conversational reply."""

    def __init__(self, model_manager, max_tokens: int = 1024):
        self.model_manager = model_manager
        self.max_tokens = max_tokens

    async def generate(
        self,
        user_input: str,
        intent: str,
        parameters: QueryParameters,
        analysis: Any,
        language: str = "vi",
    ) -> str:
        """Generate the reply. Never raises; degrades to a raw analysis dump."""
        prompt = self.build_prompt(user_input, intent, parameters, analysis, language)

        try:
            text = await self.model_manager.generate_content(prompt, max_tokens=self.max_tokens)
        except Exception as e:
            logger.warning(f"Response generation degraded: {type(e).__name__}: {e}")
            return fallback_reply(analysis, language)

        if not text or not text.strip():
            logger.warning("Response generation returned empty text")
            return fallback_reply(analysis, language)

        return text.strip()

    def build_prompt(
        self,
        user_input: str,
        intent: str,
        parameters: QueryParameters,
        analysis: Any,
        language: str,
    ) -> str:
        try:
            guidance = INTENT_GUIDANCE.get(Intent(intent), DEFAULT_GUIDANCE)
        except ValueError:
            guidance = DEFAULT_GUIDANCE
        language_name = LANGUAGE_NAMES.get(language, "English")

        return f"""You are a friendly and helpful weather assistant.

USER QUESTION: "{user_input}"
INTENT: {intent}
PARAMETERS: {to_pretty_json(parameters.to_dict())}
WEATHER ANALYSIS: {to_pretty_json(analysis)}
LANGUAGE: {language}

TASK: Generate a natural, conversational response in {language_name}.

GUIDELINES:
1. Be concise but informative
2. Use appropriate emojis (☀️🌧️❄️🌤️☁️🌡️💨💧)
3. Format numbers nicely (e.g., 28.5°C, not 28.483°C)
4. Add practical advice when relevant
5. Use friendly, conversational tone
6. If the analysis contains an error, say the data is unavailable instead of guessing

RESPONSE STRUCTURE for {intent}:
{guidance}

FORMAT:
- Use line breaks for readability
- Use bullet points (•) for lists
- Keep total response under 300 words

Generate the response now:"""
