"""
Tests for the ParameterExtractor stage.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.fixtures import FIXED_TODAY, params_json
from weather_chat.models import ComparisonType, ConversationContext, TimeRange
from weather_chat.pipeline import ParameterExtractor
from weather_chat.providers import RateLimitError


def make_extractor(text=None, side_effect=None, default_location="Hanoi"):
    manager = MagicMock()
    manager.generate_content = AsyncMock(return_value=text, side_effect=side_effect)
    extractor = ParameterExtractor(
        manager, default_location=default_location, today=lambda: FIXED_TODAY
    )
    return extractor, manager


class TestParameterExtractor:
    """Test parameter extraction and enrichment."""

    @pytest.mark.asyncio
    async def test_extract_full_payload(self):
        """Test a complete model answer maps onto QueryParameters."""
        extractor, _ = make_extractor(
            params_json(
                locations=["Hanoi", "Saigon"],
                time_range="future",
                date_start="2024-12-08",
                date_end="2024-12-14",
                metrics=["temperature", "precipitation"],
                comparison_type="location_comparison",
                original_time_expression="tuần tới",
                confidence=0.88,
            )
        )

        params = await extractor.extract("So sánh Hà Nội và Sài Gòn tuần tới", "COMPARISON")

        assert params.locations == ["Hanoi", "Saigon"]
        assert params.time_range == TimeRange.FUTURE
        assert params.date_start == date(2024, 12, 8)
        assert params.date_end == date(2024, 12, 14)
        assert params.metrics == ["temperature", "precipitation"]
        assert params.comparison_type == ComparisonType.LOCATION
        assert params.original_time_expression == "tuần tới"
        assert params.confidence == 0.88
        assert params.resolved_from_context is False

    @pytest.mark.asyncio
    async def test_camel_case_fields_accepted(self):
        """Test camelCase spellings are read too."""
        extractor, _ = make_extractor(
            '{"locations": ["Hue"], "timeRange": "past", "dateStart": "2024-12-01", '
            '"dateEnd": "2024-12-03", "metrics": ["wind"], "comparisonType": "none"}'
        )

        params = await extractor.extract("Tuần trước Huế gió thế nào?", "HISTORICAL_QUERY")

        assert params.time_range == TimeRange.PAST
        assert params.date_start == date(2024, 12, 1)
        assert params.date_end == date(2024, 12, 3)

    @pytest.mark.asyncio
    async def test_empty_fields_filled_with_defaults(self):
        """Test missing locations, dates and metrics get defaults."""
        extractor, _ = make_extractor(params_json())

        params = await extractor.extract("Thời tiết hôm nay thế nào?", "CURRENT_WEATHER")

        assert params.locations == ["Hanoi"]
        assert params.time_range == TimeRange.CURRENT
        assert params.date_start == params.date_end == FIXED_TODAY
        assert params.metrics == ["temperature", "precipitation", "humidity", "wind"]
        assert params.resolved_from_context is False

    @pytest.mark.asyncio
    async def test_location_resolved_from_context(self):
        """Test a missing location is carried over from the context."""
        extractor, _ = make_extractor(params_json())
        context = ConversationContext(last_location="Hanoi")

        params = await extractor.extract("Còn ngày mai thì sao?", "FORECAST", context)

        assert params.locations == ["Hanoi"]
        assert params.resolved_from_context is True

    @pytest.mark.asyncio
    async def test_configured_default_location(self):
        """Test the default location is configurable."""
        extractor, _ = make_extractor(params_json(), default_location="Da Nang")

        params = await extractor.extract("Trời có nắng không?", "CURRENT_WEATHER")

        assert params.locations == ["Da Nang"]

    @pytest.mark.asyncio
    async def test_reversed_dates_swapped(self):
        """Test a start after end is reordered."""
        extractor, _ = make_extractor(
            params_json(date_start="2024-12-10", date_end="2024-12-08")
        )

        params = await extractor.extract("x", "FORECAST")

        assert params.date_start == date(2024, 12, 8)
        assert params.date_end == date(2024, 12, 10)

    @pytest.mark.asyncio
    async def test_only_start_date(self):
        """Test a lone start date becomes a one-day window."""
        extractor, _ = make_extractor(params_json(date_start="2024-12-25"))

        params = await extractor.extract("Giáng sinh trời thế nào?", "FORECAST")

        assert params.date_start == params.date_end == date(2024, 12, 25)

    @pytest.mark.asyncio
    async def test_unknown_enums_use_safe_values(self):
        """Test unknown time range and comparison values are replaced."""
        extractor, _ = make_extractor(
            params_json(time_range="someday", comparison_type="apples")
        )

        params = await extractor.extract("x", "FORECAST")

        assert params.time_range == TimeRange.CURRENT
        assert params.comparison_type == ComparisonType.NONE

    @pytest.mark.asyncio
    async def test_duplicate_locations_removed(self):
        """Test locations are stripped and de-duplicated in order."""
        extractor, _ = make_extractor(params_json(locations=[" Hanoi", "Hanoi", "Hue"]))

        params = await extractor.extract("x", "MULTI_LOCATION")

        assert params.locations == ["Hanoi", "Hue"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text,side_effect",
        [
            ("the user means Hanoi", None),
            (params_json(locations=[1, 2]), None),
            (params_json(locations={"city": "Hanoi"}), None),
            (params_json(confidence="high"), None),
            (params_json(locations=["Hue"], confidence=float("nan")), None),
            (params_json(locations=["Hue"], confidence=float("inf")), None),
            ('{"locations": ["Hue"], "confidence": -Infinity}', None),
            (None, RateLimitError("slow down", provider="openrouter")),
        ],
    )
    async def test_failures_degrade_to_defaults(self, text, side_effect):
        """Test every failure yields a complete minimal parameter set."""
        extractor, _ = make_extractor(text, side_effect=side_effect)

        params = await extractor.extract("x", "CURRENT_WEATHER")

        assert params.locations == ["Hanoi"]
        assert params.metrics == ["temperature", "precipitation"]
        assert params.date_start == params.date_end == FIXED_TODAY
        assert params.time_range == TimeRange.CURRENT
        assert params.confidence == 0.5

    @pytest.mark.asyncio
    async def test_failure_uses_context_location(self):
        """Test the fallback still honours the last location."""
        extractor, _ = make_extractor(side_effect=TimeoutError())
        context = ConversationContext(last_location="Saigon")

        params = await extractor.extract("x", "CURRENT_WEATHER", context)

        assert params.locations == ["Saigon"]
        assert params.resolved_from_context is True
        assert params.date_start <= params.date_end

    @pytest.mark.asyncio
    async def test_prompt_mentions_today(self):
        """Test the prompt anchors relative dates to today."""
        extractor, manager = make_extractor(params_json())

        await extractor.extract("ngày mai", "FORECAST")

        prompt = manager.generate_content.call_args.args[0]
        assert prompt.startswith("You are a parameter extraction expert")
        assert "Today is 2024-12-07" in prompt
        assert "INTENT: FORECAST" in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "flag,expected",
        [("false", False), ("False", False), ("true", True), (0, False), (None, False), (True, True)],
    )
    async def test_resolved_from_context_flag(self, flag, expected):
        """Test only a real or spelled-out true marks context use."""
        extractor, _ = make_extractor(
            params_json(locations=["Hue"], resolved_from_context=flag)
        )

        params = await extractor.extract("Huế hôm nay?", "CURRENT_WEATHER")

        assert params.locations == ["Hue"]
        assert params.resolved_from_context is expected
