"""OpenRouter text-generation provider."""

import logging
import os
from typing import Any, Optional

from openai import AsyncOpenAI

from .base import AuthenticationError, LLMProvider, LLMResponse, classify_provider_error

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(LLMProvider):
    """Provider using the OpenRouter chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "google/gemini-2.5-flash",
        timeout: float = 30.0,
        app_name: str = "weather-chat",
    ):
        """Initialize the OpenRouter provider.

        Args:
            api_key: OpenRouter API key. If None, reads from OPENROUTER_API_KEY env var.
            default_model: Default model to use for generation.
            timeout: Request timeout in seconds.
            app_name: Application name for OpenRouter headers.
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        self.default_model = default_model
        self.timeout = timeout
        self.app_name = app_name
        self._client: Optional[AsyncOpenAI] = None

    @property
    def name(self) -> str:
        return "openrouter"

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create the async OpenAI client configured for OpenRouter."""
        if self._client is None:
            if not self.api_key:
                raise AuthenticationError(
                    "OpenRouter API key not configured. "
                    "Set OPENROUTER_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(
                base_url=OPENROUTER_BASE_URL,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
                default_headers={"X-Title": self.app_name},
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        model_id = model or self.default_model
        logger.debug(f"Generating with OpenRouter model: {model_id}")

        try:
            response = await self.client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"OpenRouter error: {e}")
            raise classify_provider_error(e, self.name, model_id) from e

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content,
            model=model_id,
            usage=usage,
            metadata={"id": response.id, "created": response.created},
        )

    def is_available(self) -> bool:
        return bool(self.api_key)
