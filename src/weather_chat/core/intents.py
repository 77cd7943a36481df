"""Fixed intent taxonomy for weather conversations.

Each intent carries a description, example phrasings in Vietnamese and
English, a time-scope hint and capability flags. The flags only feed
prompt construction; nothing branches on them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    """What the user is asking for."""

    CURRENT_WEATHER = "CURRENT_WEATHER"
    FORECAST = "FORECAST"
    HISTORICAL_QUERY = "HISTORICAL_QUERY"
    COMPARISON = "COMPARISON"
    TREND_ANALYSIS = "TREND_ANALYSIS"
    EXTREME_EVENTS = "EXTREME_EVENTS"
    RECOMMENDATION = "RECOMMENDATION"
    HEALTH_SAFETY = "HEALTH_SAFETY"
    PLANNING = "PLANNING"
    STATISTICAL_INFO = "STATISTICAL_INFO"
    MULTI_LOCATION = "MULTI_LOCATION"
    CLARIFICATION = "CLARIFICATION"
    GENERAL_CHAT = "GENERAL_CHAT"


@dataclass(frozen=True)
class IntentDefinition:
    """Prompt-facing description of an intent."""

    description: str
    examples: tuple[str, ...]
    time_scope: Optional[str]
    flags: frozenset[str] = field(default_factory=frozenset)


INTENT_DEFINITIONS: dict[Intent, IntentDefinition] = {
    Intent.CURRENT_WEATHER: IntentDefinition(
        description="User asks about current weather conditions",
        examples=(
            "Thời tiết hôm nay thế nào?",
            "Bây giờ trời ra sao?",
            "Hiện tại Hà Nội mấy độ?",
            "What's the weather like now?",
            "Hôm nay có mưa không?",
        ),
        time_scope="now",
    ),
    Intent.FORECAST: IntentDefinition(
        description="User asks about future weather predictions",
        examples=(
            "Ngày mai trời thế nào?",
            "Tuần tới có mưa không?",
            "Cuối tuần này thời tiết ra sao?",
            "Tomorrow's weather?",
            "3 ngày tới Sài Gòn thế nào?",
        ),
        time_scope="future",
    ),
    Intent.HISTORICAL_QUERY: IntentDefinition(
        description="User asks about past weather",
        examples=(
            "Tuần trước có mưa không?",
            "Tháng 11 thời tiết thế nào?",
            "Hôm qua trời ra sao?",
            "Last month's weather?",
            "Năm ngoái lúc này nóng không?",
        ),
        time_scope="past",
        flags=frozenset({"requiresHistorical"}),
    ),
    Intent.COMPARISON: IntentDefinition(
        description="User wants to compare weather between locations or times",
        examples=(
            "So sánh Hà Nội và Sài Gòn",
            "Đà Nẵng hay Nha Trang nóng hơn?",
            "Hôm nay so với hôm qua thế nào?",
            "Compare weather in 2 cities",
            "Tuần này và tuần trước khác gì?",
        ),
        time_scope="flexible",
        flags=frozenset({"requiresMultipleQueries"}),
    ),
    Intent.TREND_ANALYSIS: IntentDefinition(
        description="User wants to understand weather patterns or trends",
        examples=(
            "Xu hướng nhiệt độ tuần này?",
            "Tháng này có xu hướng nóng lên không?",
            "Mưa nhiều hơn hay ít hơn bình thường?",
            "Weather trend this month?",
            "Có pattern nào đặc biệt không?",
        ),
        time_scope="range",
        flags=frozenset({"requiresHistorical", "requiresAnalysis"}),
    ),
    Intent.EXTREME_EVENTS: IntentDefinition(
        description="User asks about extreme weather conditions",
        examples=(
            "Ngày nào nóng nhất tuần này?",
            "Khi nào mưa to nhất?",
            "Nhiệt độ cao nhất tháng này?",
            "Coldest day last week?",
            "Lúc nào UV index cao nhất?",
        ),
        time_scope="range",
        flags=frozenset({"requiresHistorical", "requiresAggregation"}),
    ),
    Intent.RECOMMENDATION: IntentDefinition(
        description="User wants advice based on weather",
        examples=(
            "Hôm nay có nên đi chơi không?",
            "Thời tiết tốt cho picnic không?",
            "Nên mang ô không?",
            "Should I go running?",
            "Có nên đi biển không?",
        ),
        time_scope="now_or_future",
        flags=frozenset({"requiresContextualAdvice"}),
    ),
    Intent.HEALTH_SAFETY: IntentDefinition(
        description="User is concerned about health impacts of weather",
        examples=(
            "UV index hôm nay ra sao?",
            "Chất lượng không khí thế nào?",
            "Có nguy hiểm cho sức khỏe không?",
            "Is it safe to exercise outside?",
            "Có nên ra ngoài không với thời tiết này?",
        ),
        time_scope="now",
        flags=frozenset({"requiresHealthMetrics"}),
    ),
    Intent.PLANNING: IntentDefinition(
        description="User is planning activities with weather considerations",
        examples=(
            "Tuần nào tháng này tốt nhất để đi du lịch?",
            "Ngày nào trong tuần tới phù hợp tổ chức sự kiện ngoài trời?",
            "Best day for wedding photoshoot?",
            "Khi nào thời tiết đẹp nhất?",
            "Plan outdoor event next week",
        ),
        time_scope="future_range",
        flags=frozenset({"requiresOptimization"}),
    ),
    Intent.STATISTICAL_INFO: IntentDefinition(
        description="User wants statistical weather information",
        examples=(
            "Nhiệt độ trung bình tháng này?",
            "Tháng 11 có bao nhiêu ngày mưa?",
            "Average temperature last month?",
            "Tỷ lệ mưa trong tuần?",
            "Độ ẩm trung bình là bao nhiêu?",
        ),
        time_scope="range",
        flags=frozenset({"requiresAggregation"}),
    ),
    Intent.MULTI_LOCATION: IntentDefinition(
        description="User asks about weather in multiple locations",
        examples=(
            "Thời tiết cả 3 miền?",
            "Show weather for all my favorite cities",
            "Đà Nẵng, Huế, Nha Trang thế nào?",
            "Weather in top 5 cities?",
            "Các thành phố lớn VN hiện tại ra sao?",
        ),
        time_scope="now",
        flags=frozenset({"requiresMultipleQueries"}),
    ),
    Intent.CLARIFICATION: IntentDefinition(
        description="User's question is unclear or needs more context",
        examples=("Thế nào?", "Còn nữa?", "Chi tiết hơn được không?", "More info?", "Explain"),
        time_scope="context_dependent",
        flags=frozenset({"requiresContext"}),
    ),
    Intent.GENERAL_CHAT: IntentDefinition(
        description="User makes small talk or greetings",
        examples=("Xin chào", "Hello", "Cảm ơn bạn", "Thanks!", "Bạn là ai?"),
        time_scope=None,
        flags=frozenset({"noWeatherQuery"}),
    ),
}


def parse_intent(value: object) -> Optional[Intent]:
    """Return the Intent for a raw model value, or None when it is not in the taxonomy."""
    if not isinstance(value, str):
        return None
    try:
        return Intent(value.strip().upper())
    except ValueError:
        return None


def describe_intents() -> str:
    """Render the taxonomy as a prompt section."""
    blocks = []
    for intent, definition in INTENT_DEFINITIONS.items():
        lines = [f"{intent.value}: {definition.description}"]
        lines.append(f"Examples: {', '.join(definition.examples)}")
        if definition.time_scope:
            lines.append(f"Time scope: {definition.time_scope}")
        if definition.flags:
            lines.append(f"Needs: {', '.join(sorted(definition.flags))}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
