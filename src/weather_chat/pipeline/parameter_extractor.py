"""Parameter extraction stage."""

import logging
import math
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from ..core.json_payload import coerce_flag, parse_model_json, to_pretty_json
from ..errors import MalformedModelOutputError
from ..models import (
    DEFAULT_METRICS,
    MINIMAL_METRICS,
    ComparisonType,
    ConversationContext,
    QueryParameters,
    TimeRange,
)

logger = logging.getLogger(__name__)


def _field(payload: Dict[str, Any], *names: str) -> Any:
    """Return the first non-null value among snake_case/camelCase spellings."""
    for name in names:
        value = payload.get(name)
        if value is not None:
            return value
    return None


def _string_list(value: Any, field_name: str) -> List[str]:
    """Coerce a model value into a de-duplicated list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise MalformedModelOutputError(f"'{field_name}' must be a list")

    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise MalformedModelOutputError(f"'{field_name}' must contain strings")
        item = item.strip()
        if item and item not in items:
            items.append(item)
    return items


def _parse_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.debug(f"Ignoring unparseable date from model: {value!r}")
        return None


class ParameterExtractor:
    """Turns an utterance into fully-populated QueryParameters."""

    def __init__(
        self,
        model_manager,
        default_location: str = "Hanoi",
        today: Callable[[], date] = date.today,
    ):
        self.model_manager = model_manager
        self.default_location = default_location
        self.today = today

    async def extract(
        self,
        user_input: str,
        intent: str,
        context: Optional[ConversationContext] = None,
    ) -> QueryParameters:
        """Extract parameters. Never raises; degrades to a minimal default set."""
        context = context or ConversationContext()
        prompt = self.build_prompt(user_input, intent, context)

        try:
            text = await self.model_manager.generate_content(prompt, temperature=0.2)
            payload = parse_model_json(text)
            parameters = self._from_payload(payload)
        except Exception as e:
            logger.warning(f"Parameter extraction degraded: {type(e).__name__}: {e}")
            return self.default_parameters(context)

        return self.enrich(parameters, context)

    def _from_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate raw model fields; unknown enum values fall back to safe ones."""
        raw_time_range = _field(payload, "time_range", "timeRange")
        try:
            time_range = TimeRange(str(raw_time_range).strip().lower())
        except ValueError:
            time_range = TimeRange.CURRENT

        raw_comparison = _field(payload, "comparison_type", "comparisonType")
        try:
            comparison_type = ComparisonType(str(raw_comparison).strip().lower())
        except ValueError:
            comparison_type = ComparisonType.NONE

        raw_confidence = payload.get("confidence", 0.5)
        try:
            confidence = float(raw_confidence)
        except (TypeError, ValueError):
            raise MalformedModelOutputError(f"Invalid confidence: {raw_confidence!r}")
        if not math.isfinite(confidence):
            raise MalformedModelOutputError(f"Non-finite confidence: {raw_confidence!r}")

        expression = _field(payload, "original_time_expression", "originalTimeExpression")

        return {
            "locations": _string_list(payload.get("locations"), "locations"),
            "time_range": time_range,
            "date_start": _parse_date(_field(payload, "date_start", "dateStart")),
            "date_end": _parse_date(_field(payload, "date_end", "dateEnd")),
            "metrics": _string_list(payload.get("metrics"), "metrics"),
            "comparison_type": comparison_type,
            "resolved_from_context": coerce_flag(
                _field(payload, "resolved_from_context", "resolvedFromContext")
            ),
            "confidence": min(max(confidence, 0.0), 1.0),
            "original_time_expression": str(expression) if expression else None,
        }

    def enrich(self, raw: Dict[str, Any], context: ConversationContext) -> QueryParameters:
        """Fill every gap from context first, then from hard defaults."""
        locations = raw["locations"]
        resolved_from_context = raw["resolved_from_context"]
        if not locations:
            if context.last_location:
                locations = [context.last_location]
                resolved_from_context = True
            else:
                locations = [self.default_location]

        date_start = raw["date_start"]
        date_end = raw["date_end"]
        if date_start is None:
            date_start = date_end = self.today()
        elif date_end is None:
            date_end = date_start
        if date_start > date_end:
            date_start, date_end = date_end, date_start

        metrics = raw["metrics"] or list(DEFAULT_METRICS)

        return QueryParameters(
            locations=locations,
            time_range=raw["time_range"],
            date_start=date_start,
            date_end=date_end,
            metrics=metrics,
            comparison_type=raw["comparison_type"],
            resolved_from_context=resolved_from_context,
            confidence=raw["confidence"],
            original_time_expression=raw["original_time_expression"],
        )

    def default_parameters(self, context: ConversationContext) -> QueryParameters:
        """Minimal parameter set used when extraction fails outright."""
        today = self.today()
        return QueryParameters(
            locations=[context.last_location or self.default_location],
            time_range=TimeRange.CURRENT,
            date_start=today,
            date_end=today,
            metrics=list(MINIMAL_METRICS),
            comparison_type=ComparisonType.NONE,
            resolved_from_context=bool(context.last_location),
            confidence=0.5,
        )

    def build_prompt(self, user_input: str, intent: str, context: ConversationContext) -> str:
        today = self.today().isoformat()
        return f"""You are a parameter extraction expert for weather queries.

USER INPUT: "{user_input}"
INTENT: {intent}
CONVERSATION CONTEXT: {to_pretty_json(context.to_dict())}

TASK: Extract the following parameters from the user input:

1. LOCATIONS: List of cities/places mentioned
   - If no location mentioned, check context for previous location
   - Normalize city names (e.g., "Sài Gòn" → "Saigon", "HN" → "Hanoi")

2. TIME_RANGE: When is the user asking about?
   - current: now, today, hiện tại
   - future: tomorrow, next week, ngày mai, tuần tới
   - past: yesterday, last week, hôm qua, tuần trước
   - specific_date: any specific date mentioned

3. DATE_START and DATE_END (YYYY-MM-DD format)
   - Calculate based on time_range
   - Today is {today}

4. METRICS: What weather aspects are they asking about?
   - temperature, precipitation, humidity, wind, uv, aqi
   - If not specified, include all relevant metrics

5. COMPARISON_TYPE: If intent is COMPARISON
   - location_comparison: comparing different cities
   - time_comparison: comparing different time periods
   - none: not a comparison

6. RESOLVED_FROM_CONTEXT: Boolean - did you use context to fill in missing info?

RESPOND IN JSON FORMAT ONLY:
{{
  "locations": ["City1", "City2"],
  "time_range": "current|future|past|specific_date",
  "date_start": "{today}",
  "date_end": "{today}",
  "metrics": ["temperature", "precipitation"],
  "comparison_type": "none",
  "resolved_from_context": false,
  "original_time_expression": "hôm nay",
  "confidence": 0.95
}}"""
