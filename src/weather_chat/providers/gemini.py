"""Google Gemini text-generation provider."""

import logging
import os
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.generativeai.types import GenerationConfig, RequestOptions

from .base import AuthenticationError, LLMProvider, LLMResponse, classify_provider_error

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Provider talking to Gemini models through google-generativeai."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gemini-2.5-flash",
        timeout: float = 30.0,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.default_model = default_model
        self.timeout = timeout
        self._configured = False
        self._models: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return "gemini"

    def _get_model(self, model_name: str):
        """Get or lazily initialize a GenerativeModel."""
        if not self.api_key:
            raise AuthenticationError(
                "Gemini API key not configured. Set GEMINI_API_KEY environment variable.",
                provider=self.name,
            )
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True
        if model_name not in self._models:
            self._models[model_name] = genai.GenerativeModel(model_name)
            logger.info(f"Gemini model initialized: {model_name}")
        return self._models[model_name]

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        model_name = model or self.default_model
        gemini_model = self._get_model(model_name)

        generation_config = GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens or 2048,
            top_p=kwargs.pop("top_p", 0.95),
            top_k=kwargs.pop("top_k", 40),
        )

        try:
            response = await gemini_model.generate_content_async(
                prompt,
                generation_config=generation_config,
                request_options=RequestOptions(timeout=self.timeout),
            )
            text = response.text
        except Exception as e:
            error_type = type(e).__name__
            logger.error(f"Gemini error: {error_type}: {e}")
            if hasattr(e, "code"):
                logger.debug(f"Error code: {e.code}")
            raise classify_provider_error(e, self.name, model_name) from e

        usage = {}
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata is not None:
            usage = {
                "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0),
                "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0),
                "total_tokens": getattr(usage_metadata, "total_token_count", 0),
            }

        return LLMResponse(content=text, model=model_name, usage=usage)

    def is_available(self) -> bool:
        return bool(self.api_key)
