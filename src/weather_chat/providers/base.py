"""Base classes for text-generation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class LLMResponse:
    """Response from a text-generation provider."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):
    """Abstract base class for text-generation providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs and stats."""
        ...

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Send one prompt and return the model text.

        The pipeline stages only read LLMResponse.content; usage and metadata
        are kept for logging and stats.

        Raises:
            LLMProviderError: On any provider failure. Callers treat every
                subclass as the provider being unavailable.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """True when credentials are present."""
        ...


class LLMProviderError(Exception):
    """Base exception for text-generation provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        model: str = "",
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.is_retryable = is_retryable


class RateLimitError(LLMProviderError):
    """Provider rejected the call with a rate limit (HTTP 429)."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=True)


class AuthenticationError(LLMProviderError):
    """Missing or rejected API key."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)


class ModelNotFoundError(LLMProviderError):
    """Configured model id is unknown to the provider."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)


class ProviderTimeoutError(LLMProviderError):
    """Raised when the provider does not answer within the configured timeout."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=True)


def classify_provider_error(error: Exception, provider: str, model: str) -> LLMProviderError:
    """Map a raw client exception onto the provider error taxonomy."""
    error_msg = str(error) or type(error).__name__
    lowered = error_msg.lower()

    if "rate" in lowered or "429" in error_msg:
        return RateLimitError(error_msg, provider=provider, model=model)
    if "auth" in lowered or "401" in error_msg or "403" in error_msg:
        return AuthenticationError(error_msg, provider=provider, model=model)
    if "not found" in lowered or "404" in error_msg:
        return ModelNotFoundError(error_msg, provider=provider, model=model)
    if "timeout" in lowered or "timed out" in lowered:
        return ProviderTimeoutError(error_msg, provider=provider, model=model)
    return LLMProviderError(error_msg, provider=provider, model=model)
