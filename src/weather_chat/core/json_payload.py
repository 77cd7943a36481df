"""Extraction of JSON payloads from free-form model output.

Models are asked for JSON but routinely wrap it in prose or markdown fences.
Parsing is two-phase: pick a candidate span (fenced block, then the first
balanced brace span, then the raw text), then decode and validate it.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, Optional

from ..errors import MalformedModelOutputError

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first balanced {...} span, skipping braces inside string literals."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unterminated object starting here; try the next opening brace
        start = text.find("{", start + 1)
    return None


def extract_json_candidate(text: str) -> str:
    """Pick the span of model output most likely to hold the JSON payload."""
    for match in _FENCED_BLOCK.finditer(text):
        block = match.group(1).strip()
        if block.startswith("{") or block.startswith("["):
            return block

    balanced = _first_balanced_object(text)
    if balanced is not None:
        return balanced

    logger.debug("No JSON span found in model output, using raw text")
    return text.strip()


def parse_model_json(text: Optional[str], required: Iterable[str] = ()) -> Dict[str, Any]:
    """Decode a JSON object from model output and check required keys.

    Raises:
        MalformedModelOutputError: If no object can be decoded or a required key is missing.
    """
    if not text or not text.strip():
        raise MalformedModelOutputError("Empty model output", raw_text=text or "")

    candidate = extract_json_candidate(text)
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedModelOutputError(f"Invalid JSON: {e}", raw_text=text) from e

    if not isinstance(payload, dict):
        raise MalformedModelOutputError(
            f"Expected a JSON object, got {type(payload).__name__}", raw_text=text
        )

    missing = [key for key in required if payload.get(key) is None]
    if missing:
        raise MalformedModelOutputError(
            f"Missing required fields: {', '.join(missing)}", raw_text=text
        )

    return payload


def coerce_flag(value: Any) -> bool:
    """Read a model-supplied boolean. Only true or "true" count as set."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def to_pretty_json(value: Any) -> str:
    """Serialize a value for embedding in prompts and fallback replies."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
