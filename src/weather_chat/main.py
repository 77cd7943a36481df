"""
Entry point wiring the pipeline components into the HTTP service.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from . import __version__
from .api import create_app
from .config import PipelineConfig
from .core.orchestrator import ConversationOrchestrator
from .manager import ModelManager, create_provider
from .pipeline import IntentClassifier, ParameterExtractor, ResponseGenerator
from .services.cache import ResponseCache
from .services.session_store import InMemoryContextStore
from .weather.adapter import HttpWeatherAnalysisAdapter

logger = logging.getLogger(__name__)


def load_env_file() -> Optional[str]:
    """Load the first .env file found; returns its path."""
    # 1. Directory of the main entry point
    main_dir = os.path.dirname(os.path.abspath(sys.argv[0]))
    # 2. Parent directory of main (in case we're in a subdirectory)
    parent_dir = os.path.dirname(main_dir)
    # 3. Current working directory
    cwd = os.getcwd()
    # 4. Package directory
    package_dir = os.path.dirname(os.path.abspath(__file__))

    for directory in (main_dir, parent_dir, cwd, package_dir):
        env_path = os.path.join(directory, ".env")
        if os.path.exists(env_path):
            logger.info(f"Loading .env from {env_path}")
            load_dotenv(env_path)
            return env_path

    logger.info("No .env file found in expected locations")
    return None


def build_orchestrator(config: PipelineConfig) -> ConversationOrchestrator:
    """Construct every pipeline component from the config."""
    provider = create_provider(config)
    if not provider.is_available():
        logger.warning(
            f"No API key configured for provider '{provider.name}'; "
            "model-backed stages will fall back on every call"
        )

    model_manager = ModelManager(provider, model=config.model, timeout=config.timeout)
    store = InMemoryContextStore(
        max_history=config.history_limit, default_language=config.language
    )

    return ConversationOrchestrator(
        store=store,
        classifier=IntentClassifier(model_manager),
        extractor=ParameterExtractor(model_manager, default_location=config.default_location),
        generator=ResponseGenerator(model_manager),
        weather=HttpWeatherAnalysisAdapter(config.analysis_url, timeout=config.timeout),
        cache=ResponseCache(max_size=100, ttl_seconds=config.cache_ttl_seconds),
        model_manager=model_manager,
    )


def configure_logging(debug: bool) -> str:
    """Log to stderr and a rotating file; returns the log file path."""
    log_dir = os.path.expanduser("~/.weather-chat/logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "weather-chat.log")

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stderr),
        RotatingFileHandler(
            log_file,
            mode="a",
            encoding="utf-8",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        ),
    ]

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    return log_file


def main():
    """Main entry point."""
    log_file = configure_logging(bool(os.getenv("WEATHER_CHAT_DEBUG")))
    logger.info(f"Logging to file: {log_file}")

    load_env_file()
    config = PipelineConfig.from_env()
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        app = create_app(build_orchestrator(config))
        logger.info(f"Starting Weather Chat v{__version__} on {config.host}:{config.port}")
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
