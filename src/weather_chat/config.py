"""Runtime configuration for the weather chat service."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openrouter": "google/gemini-2.5-flash",
    "gemini": "gemini-2.5-flash",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable settings shared by the pipeline components."""

    provider: str = "openrouter"
    model: str = DEFAULT_MODELS["openrouter"]
    timeout: float = 30.0
    default_location: str = "Hanoi"
    language: str = "vi"
    analysis_url: str = "http://localhost:3001"
    history_limit: int = 10
    cache_ttl_seconds: int = 600
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from WEATHER_CHAT_* environment variables.

        WEATHER_CHAT_TIMEOUT is given in milliseconds.
        """
        provider = os.getenv("WEATHER_CHAT_PROVIDER", "openrouter").strip().lower()
        if provider not in DEFAULT_MODELS:
            logger.warning(f"Unknown provider '{provider}', using openrouter")
            provider = "openrouter"

        return cls(
            provider=provider,
            model=os.getenv("WEATHER_CHAT_MODEL") or DEFAULT_MODELS[provider],
            timeout=float(os.getenv("WEATHER_CHAT_TIMEOUT", "30000")) / 1000,
            default_location=os.getenv("WEATHER_CHAT_DEFAULT_LOCATION") or "Hanoi",
            language=os.getenv("WEATHER_CHAT_LANGUAGE") or "vi",
            analysis_url=os.getenv("WEATHER_ANALYSIS_URL") or "http://localhost:3001",
            history_limit=int(os.getenv("WEATHER_CHAT_HISTORY_LIMIT", "10")),
            cache_ttl_seconds=int(os.getenv("WEATHER_CHAT_CACHE_TTL", "600")),
            host=os.getenv("WEATHER_CHAT_HOST", "0.0.0.0"),
            port=int(os.getenv("WEATHER_CHAT_PORT", "8000")),
            debug=bool(os.getenv("WEATHER_CHAT_DEBUG")),
        )
