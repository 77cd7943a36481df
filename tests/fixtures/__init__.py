"""Test fixtures for the weather chat tests."""

import json
from datetime import date
from typing import Any, Dict, List, Optional, Union

from weather_chat.core.orchestrator import ConversationOrchestrator
from weather_chat.models import QueryParameters
from weather_chat.pipeline import IntentClassifier, ParameterExtractor, ResponseGenerator
from weather_chat.providers import LLMProviderError
from weather_chat.services.cache import ResponseCache
from weather_chat.services.session_store import InMemoryContextStore
from weather_chat.weather.adapter import WeatherAnalysisAdapter

FIXED_TODAY = date(2024, 12, 7)

Scripted = Union[str, Exception]


def stage_of(prompt: str) -> str:
    """Tell which pipeline stage built a prompt."""
    if prompt.startswith("You are an intent classification expert"):
        return "classify"
    if prompt.startswith("You are a parameter extraction expert"):
        return "extract"
    return "generate"


class ScriptedModelManager:
    """Stands in for ModelManager, answering each stage from a script.

    Each stage maps to a single answer or a list consumed one call at a time.
    Exceptions in the script are raised instead of returned.
    """

    def __init__(self, **script: Union[Scripted, List[Scripted]]):
        self.script: Dict[str, List[Scripted]] = {
            stage: list(value) if isinstance(value, list) else [value]
            for stage, value in script.items()
        }
        self.prompts: List[str] = []

    def prompts_for(self, stage: str) -> List[str]:
        return [p for p in self.prompts if stage_of(p) == stage]

    async def generate_content(self, prompt: str, **kwargs: Any) -> str:
        self.prompts.append(prompt)
        stage = stage_of(prompt)
        answers = self.script.get(stage)
        if not answers:
            raise LLMProviderError(f"No scripted answer for {stage}", provider="scripted")
        answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get_stats(self) -> Dict[str, Any]:
        return {"provider": "scripted", "total_calls": len(self.prompts)}


class FailingModelManager(ScriptedModelManager):
    """Every call fails like an unreachable provider."""

    async def generate_content(self, prompt: str, **kwargs: Any) -> str:
        self.prompts.append(prompt)
        raise LLMProviderError("Connection refused", provider="scripted")


class FakeWeatherAdapter(WeatherAnalysisAdapter):
    """Records queries and returns a fixed analysis or raises a fixed error."""

    def __init__(self, analysis: Any = None, error: Optional[Exception] = None):
        self.analysis = analysis if analysis is not None else {"Hanoi": {"temperature": 28.5}}
        self.error = error
        self.calls: List[tuple[str, QueryParameters]] = []

    async def analyze(self, intent: str, parameters: QueryParameters) -> Any:
        self.calls.append((intent, parameters))
        if self.error is not None:
            raise self.error
        return self.analysis


def intent_json(intent: str, confidence: float = 0.9, requires_context: bool = False) -> str:
    return json.dumps(
        {
            "intent": intent,
            "confidence": confidence,
            "reasoning": "test",
            "requiresContext": requires_context,
        }
    )


def params_json(**fields: Any) -> str:
    payload = {
        "locations": [],
        "time_range": "current",
        "date_start": None,
        "date_end": None,
        "metrics": [],
        "comparison_type": "none",
        "resolved_from_context": False,
        "confidence": 0.9,
    }
    payload.update(fields)
    return json.dumps(payload, ensure_ascii=False)


def build_orchestrator(
    model_manager: Any,
    weather: Optional[WeatherAnalysisAdapter] = None,
    store: Optional[InMemoryContextStore] = None,
) -> ConversationOrchestrator:
    """Wire an orchestrator around fakes, with today pinned to FIXED_TODAY."""
    return ConversationOrchestrator(
        store=store or InMemoryContextStore(),
        classifier=IntentClassifier(model_manager),
        extractor=ParameterExtractor(model_manager, today=lambda: FIXED_TODAY),
        generator=ResponseGenerator(model_manager),
        weather=weather or FakeWeatherAdapter(),
        cache=ResponseCache(),
        model_manager=model_manager,
    )
