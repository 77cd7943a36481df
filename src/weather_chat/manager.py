"""Model manager shared by the LLM-backed pipeline stages."""

import asyncio
import logging
from typing import Any, Optional

from .config import PipelineConfig
from .providers import (
    GeminiProvider,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    OpenRouterProvider,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)


def create_provider(config: PipelineConfig) -> LLMProvider:
    """Build the text-generation provider named in the config."""
    if config.provider == "gemini":
        return GeminiProvider(default_model=config.model, timeout=config.timeout)
    return OpenRouterProvider(default_model=config.model, timeout=config.timeout)


class ModelManager:
    """Text-generation capability handed to the classifier, extractor and generator.

    This class provides a unified interface for:
    - Generating content through the configured provider
    - Enforcing the request timeout
    - Tracking usage statistics
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """Initialize the model manager.

        Args:
            provider: The provider used for every generation call.
            model: Model override. If None, the provider's default model is used.
            timeout: Seconds to wait for a provider answer before giving up.
        """
        self.provider = provider
        self.model = model
        self.timeout = timeout

        # Statistics
        self.total_calls = 0
        self.successful_calls = 0
        self.failed_calls = 0

        logger.info(f"ModelManager initialized with provider: {provider.name}")

    async def generate(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Generate content and return the full response object.

        Raises:
            LLMProviderError: If generation fails or times out.
        """
        self.total_calls += 1

        try:
            response = await asyncio.wait_for(
                self.provider.generate(prompt, model=self.model, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self.failed_calls += 1
            logger.warning(f"{self.provider.name} timed out after {self.timeout}s")
            raise ProviderTimeoutError(
                f"Generation timed out after {self.timeout}s",
                provider=self.provider.name,
                model=self.model or "",
            )
        except LLMProviderError as e:
            self.failed_calls += 1
            logger.error(f"Generation failed: {e}")
            raise

        self.successful_calls += 1
        return response

    async def generate_content(self, prompt: str, **kwargs: Any) -> str:
        """Generate content and return only the text."""
        response = await self.generate(prompt, **kwargs)
        return response.content

    def is_available(self) -> bool:
        return self.provider.is_available()

    def get_stats(self) -> dict[str, Any]:
        """Get usage statistics."""
        success_rate = (
            (self.successful_calls / self.total_calls * 100) if self.total_calls > 0 else 0
        )
        return {
            "provider": self.provider.name,
            "model": self.model,
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "success_rate": f"{success_rate:.1f}%",
        }
