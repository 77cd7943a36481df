"""Core components of the weather chat service.

The orchestrator is imported from ``weather_chat.core.orchestrator`` directly;
the pipeline stages depend on this package's taxonomy and parsing helpers.
"""

from .intents import INTENT_DEFINITIONS, Intent, IntentDefinition
from .json_payload import coerce_flag, extract_json_candidate, parse_model_json

__all__ = [
    "INTENT_DEFINITIONS",
    "coerce_flag",
    "Intent",
    "IntentDefinition",
    "extract_json_candidate",
    "parse_model_json",
]
