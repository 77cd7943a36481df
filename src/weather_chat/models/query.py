"""Structured query models produced by the pipeline stages."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class TimeRange(str, Enum):
    """Time window a query refers to."""

    CURRENT = "current"
    FUTURE = "future"
    PAST = "past"
    SPECIFIC_DATE = "specific_date"


class ComparisonType(str, Enum):
    """What a comparison query compares."""

    LOCATION = "location_comparison"
    TIME = "time_comparison"
    NONE = "none"


DEFAULT_METRICS = ["temperature", "precipitation", "humidity", "wind"]
MINIMAL_METRICS = ["temperature", "precipitation"]


@dataclass
class IntentResult:
    """Outcome of intent classification."""

    intent: str
    confidence: float
    reasoning: str
    requires_context: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "requiresContext": self.requires_context,
        }


@dataclass
class QueryParameters:
    """Slot-filled weather query. Always fully populated after extraction."""

    locations: List[str]
    time_range: TimeRange
    date_start: date
    date_end: date
    metrics: List[str] = field(default_factory=lambda: list(DEFAULT_METRICS))
    comparison_type: ComparisonType = ComparisonType.NONE
    resolved_from_context: bool = False
    confidence: float = 0.5
    original_time_expression: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "locations": list(self.locations),
            "timeRange": self.time_range.value,
            "dateStart": self.date_start.isoformat(),
            "dateEnd": self.date_end.isoformat(),
            "metrics": list(self.metrics),
            "comparisonType": self.comparison_type.value,
            "resolvedFromContext": self.resolved_from_context,
            "confidence": self.confidence,
        }
        if self.original_time_expression:
            data["originalTimeExpression"] = self.original_time_expression
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryParameters":
        """Rebuild parameters previously produced by to_dict."""
        return cls(
            locations=list(data["locations"]),
            time_range=TimeRange(data["timeRange"]),
            date_start=date.fromisoformat(data["dateStart"]),
            date_end=date.fromisoformat(data["dateEnd"]),
            metrics=list(data["metrics"]),
            comparison_type=ComparisonType(data.get("comparisonType", "none")),
            resolved_from_context=bool(data.get("resolvedFromContext", False)),
            confidence=float(data.get("confidence", 0.5)),
            original_time_expression=data.get("originalTimeExpression"),
        )
