"""Text-generation providers for the weather chat service."""

from .base import (
    AuthenticationError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    ModelNotFoundError,
    ProviderTimeoutError,
    RateLimitError,
    classify_provider_error,
)
from .gemini import GeminiProvider
from .openrouter import OpenRouterProvider

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "AuthenticationError",
    "RateLimitError",
    "ModelNotFoundError",
    "ProviderTimeoutError",
    "classify_provider_error",
    "GeminiProvider",
    "OpenRouterProvider",
]
