"""Unit tests for the in-memory context store."""

import asyncio
from datetime import datetime, timedelta

import pytest

from weather_chat.errors import SessionNotFoundError
from weather_chat.models import TurnRole
from weather_chat.services.session_store import InMemoryContextStore


@pytest.fixture
def store():
    return InMemoryContextStore()


class TestSessions:
    """Test session lifecycle."""

    @pytest.mark.asyncio
    async def test_get_or_create_is_idempotent(self, store):
        """Test the same id yields the same session."""
        first = await store.get_or_create("abc")
        second = await store.get_or_create("abc", owner_id="someone")

        assert first is second
        assert second.owner_id is None
        assert len(store.sessions) == 1

    @pytest.mark.asyncio
    async def test_concurrent_get_or_create(self, store):
        """Test concurrent creation never duplicates a session."""
        sessions = await asyncio.gather(*(store.get_or_create("same") for _ in range(10)))

        assert all(s is sessions[0] for s in sessions)
        assert len(store.sessions) == 1

    @pytest.mark.asyncio
    async def test_anonymous_flag(self, store):
        """Test sessions without an owner are anonymous."""
        anonymous = await store.get_or_create("a")
        owned = await store.get_or_create("b", owner_id="user-1")

        assert anonymous.is_anonymous
        assert not owned.is_anonymous

    @pytest.mark.asyncio
    async def test_get_session_missing(self, store):
        """Test explicit lookup of an unknown session raises."""
        with pytest.raises(SessionNotFoundError, match="Session nope not found"):
            await store.get_session("nope")

    @pytest.mark.asyncio
    async def test_list_by_owner(self, store):
        """Test owner listing is filtered and newest first."""
        older = await store.get_or_create("s1", owner_id="u1")
        newer = await store.get_or_create("s2", owner_id="u1")
        await store.get_or_create("s3", owner_id="u2")
        older.updated_at = datetime.now() - timedelta(hours=1)

        sessions = await store.list_by_owner("u1")

        assert [s.session_id for s in sessions] == [newer.session_id, older.session_id]

    @pytest.mark.asyncio
    async def test_get_stats(self, store):
        """Test store statistics."""
        await store.get_or_create("a")
        await store.get_or_create("b", owner_id="u1")
        await store.append_turn("a", TurnRole.USER, "hi")

        stats = store.get_stats()

        assert stats["active_sessions"] == 2
        assert stats["anonymous_sessions"] == 1
        assert stats["total_turns"] == 1


class TestTurns:
    """Test the turn log."""

    @pytest.mark.asyncio
    async def test_round_trip_preserves_order(self, store):
        """Test turns come back in insertion order with role and text intact."""
        await store.get_or_create("s")
        texts = [
            (TurnRole.USER, "Thời tiết hôm nay thế nào?"),
            (TurnRole.ASSISTANT, "Hà Nội 28°C ☀️\n• Độ ẩm 70%"),
            (TurnRole.USER, "  còn ngày mai?  "),
        ]
        for role, text in texts:
            await store.append_turn("s", role, text)

        turns = await store.list_turns("s")

        assert [(t.role, t.content) for t in turns] == texts

    @pytest.mark.asyncio
    async def test_append_accepts_role_string(self, store):
        """Test a plain role string is coerced to TurnRole."""
        await store.get_or_create("s")

        turn = await store.append_turn("s", "assistant", "ok")

        assert turn.role is TurnRole.ASSISTANT

    @pytest.mark.asyncio
    async def test_append_updates_session(self, store):
        """Test appending moves updated_at and sets the title."""
        session = await store.get_or_create("s")
        session.updated_at = datetime(2000, 1, 1)

        turn = await store.append_turn("s", TurnRole.USER, "Hà Nội có mưa không?")

        assert session.updated_at == turn.timestamp
        assert session.title == "Hà Nội có mưa không?"
        assert session.to_summary()["messageCount"] == 1

    @pytest.mark.asyncio
    async def test_append_unknown_session(self, store):
        """Test appending to an unknown session raises."""
        with pytest.raises(SessionNotFoundError):
            await store.append_turn("ghost", TurnRole.USER, "hi")

    @pytest.mark.asyncio
    async def test_list_unknown_session(self, store):
        """Test listing turns of an unknown session raises."""
        with pytest.raises(SessionNotFoundError):
            await store.list_turns("ghost")


class TestContext:
    """Test derived context, clearing and deletion."""

    @pytest.mark.asyncio
    async def test_unknown_session_has_empty_context(self, store):
        """Test context for an unknown session is empty, not an error."""
        context = await store.get_context("ghost")

        assert context.is_empty
        assert context.language == "vi"

    @pytest.mark.asyncio
    async def test_record_exchange(self, store):
        """Test a recorded exchange shows up in the context."""
        await store.get_or_create("s")

        await store.record_exchange(
            "s", "Sài Gòn hôm nay?", "CURRENT_WEATHER", {"locations": ["Saigon"]}, "r"
        )
        context = await store.get_context("s")

        assert context.last_location == "Saigon"
        assert context.last_intent == "CURRENT_WEATHER"

    @pytest.mark.asyncio
    async def test_record_exchange_unknown_session(self, store):
        """Test recording for an unknown session raises."""
        with pytest.raises(SessionNotFoundError):
            await store.record_exchange("ghost", "q", None, {}, "r")

    @pytest.mark.asyncio
    async def test_clear_owned_session(self, store):
        """Test clearing an owned session keeps its record but drops state."""
        await store.get_or_create("s", owner_id="u1")
        await store.append_turn("s", TurnRole.USER, "q")
        await store.record_exchange("s", "q", "FORECAST", {"locations": ["Hue"]}, "r")

        assert await store.clear("s") is True

        assert await store.list_turns("s") == []
        assert (await store.get_context("s")).is_empty

    @pytest.mark.asyncio
    async def test_clear_anonymous_session_removes_it(self, store):
        """Test clearing an anonymous session removes it entirely."""
        await store.get_or_create("s")

        assert await store.clear("s") is True

        assert "s" not in store.sessions
        assert (await store.get_context("s")).is_empty

    @pytest.mark.asyncio
    async def test_clear_unknown(self, store):
        """Test clearing an unknown session reports False."""
        assert await store.clear("ghost") is False

    @pytest.mark.asyncio
    async def test_delete_session(self, store):
        """Test deletion drops turns and context."""
        await store.get_or_create("s", owner_id="u1")
        await store.append_turn("s", TurnRole.USER, "q")
        await store.record_exchange("s", "q", "FORECAST", {"locations": ["Hue"]}, "r")

        assert await store.delete_session("s") is True
        assert await store.delete_session("s") is False

        with pytest.raises(SessionNotFoundError):
            await store.list_turns("s")
        assert (await store.get_context("s")).is_empty
