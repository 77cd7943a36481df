"""LLM-backed stages of the conversational weather pipeline."""

from .intent_classifier import IntentClassifier, fallback_intent
from .parameter_extractor import ParameterExtractor
from .response_generator import ResponseGenerator, fallback_reply

__all__ = [
    "IntentClassifier",
    "ParameterExtractor",
    "ResponseGenerator",
    "fallback_intent",
    "fallback_reply",
]
