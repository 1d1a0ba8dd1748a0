"""Tests for AssistantAgent: the per-message pipeline.

Covers:
- handle_message: user message and reply are both recorded
- Error handling: any failure becomes the generic apology
- Serialisation: concurrent messages never interleave in the transcript
- Error classification for logging
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.agent import GENERIC_ERROR_TEXT, AssistantAgent, _classify_error
from database.blob_store import InMemoryBlobStore
from database.repositories.message_repo import WELCOME_TEXT, MessageRepository
from integrations.gemini.client import LLMTimeoutError
from models.intent import NearbyIntent, NoneIntent
from models.message import DispatchResult
from models.place import PlaceInfo


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def classifier():
    mock = MagicMock()
    mock.classify = AsyncMock(return_value=NoneIntent())
    return mock


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.dispatch = AsyncMock(return_value=DispatchResult(text="안녕하세요!"))
    return mock


@pytest.fixture
def messages():
    return MessageRepository(InMemoryBlobStore())


@pytest.fixture
def agent(classifier, dispatcher, messages, settings):
    return AssistantAgent(classifier, dispatcher, messages, settings)


# ---------------------------------------------------------------------------
# handle_message
# ---------------------------------------------------------------------------

class TestHandleMessage:

    @pytest.mark.asyncio
    async def test_transcript_records_both_sides(self, agent, messages, now):
        reply = await agent.handle_message("안녕", now)

        transcript = await messages.load()
        assert [m.text for m in transcript] == [WELCOME_TEXT, "안녕", "안녕하세요!"]
        assert [m.is_user for m in transcript] == [False, True, False]
        assert transcript[1].timestamp == now
        assert transcript[-1].id == reply.id

    @pytest.mark.asyncio
    async def test_classifier_and_dispatcher_get_the_utterance(self, agent, classifier, dispatcher, now):
        intent = NearbyIntent(keyword="카페", category="CE7")
        classifier.classify.return_value = intent

        await agent.handle_message("근처 카페", now)

        classifier.classify.assert_awaited_once_with("근처 카페", now)
        dispatcher.dispatch.assert_awaited_once_with(intent, "근처 카페")

    @pytest.mark.asyncio
    async def test_places_are_carried_on_the_reply(self, agent, dispatcher, now):
        place = PlaceInfo(id="1", name="약국", latitude=37.5, longitude=127.0)
        dispatcher.dispatch.return_value = DispatchResult(text="찾았어요", places=[place])

        reply = await agent.handle_message("근처 약국", now)

        assert reply.places == [place]
        assert reply.transit_routes is None
        assert reply.is_user is False

    @pytest.mark.asyncio
    async def test_dispatch_failure_becomes_apology(self, agent, dispatcher, messages, now):
        dispatcher.dispatch.side_effect = RuntimeError("store exploded")

        reply = await agent.handle_message("일정 보여줘", now)

        assert reply.text == GENERIC_ERROR_TEXT
        transcript = await messages.load()
        assert [m.text for m in transcript[-2:]] == ["일정 보여줘", GENERIC_ERROR_TEXT]

    @pytest.mark.asyncio
    async def test_classifier_failure_becomes_apology(self, agent, classifier, dispatcher, now):
        classifier.classify.side_effect = LLMTimeoutError("slow")

        reply = await agent.handle_message("안녕", now)

        assert reply.text == GENERIC_ERROR_TEXT
        dispatcher.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_now_defaults_to_configured_timezone(self, agent, classifier):
        await agent.handle_message("안녕")
        sent_now = classifier.classify.call_args.args[1]
        assert sent_now.utcoffset().total_seconds() == 9 * 3600


class TestSerialisation:

    @pytest.mark.asyncio
    async def test_concurrent_messages_alternate(self, agent, dispatcher, messages, now):
        async def slow_dispatch(intent, text):
            await asyncio.sleep(0.01 if text == "첫번째" else 0)
            return DispatchResult(text=f"re: {text}")

        dispatcher.dispatch.side_effect = slow_dispatch

        await asyncio.gather(
            agent.handle_message("첫번째", now),
            agent.handle_message("두번째", now),
            agent.handle_message("세번째", now),
        )

        transcript = (await messages.load())[1:]
        assert len(transcript) == 6
        assert [m.is_user for m in transcript] == [True, False] * 3
        for user, assistant in zip(transcript[::2], transcript[1::2]):
            assert assistant.text == f"re: {user.text}"


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class TestErrorClassification:

    def test_classify_timeout(self):
        assert _classify_error(TimeoutError("slow")) == "llm_timeout"

    def test_llm_timeout_is_a_timeout(self):
        assert _classify_error(LLMTimeoutError("slow")) == "llm_timeout"

    def test_classify_connection(self):
        assert _classify_error(ConnectionError("refused")) == "connection_error"

    def test_classify_json_parse(self):
        assert _classify_error(ValueError("invalid json at pos 0")) == "parse_error"

    def test_classify_generic(self):
        assert _classify_error(RuntimeError("something weird")) == "internal_error"

    def test_classify_timeout_in_message(self):
        assert _classify_error(RuntimeError("request timeout after 30s")) == "llm_timeout"


class TestTranscriptFailures:

    @pytest.mark.asyncio
    async def test_unreadable_transcript_is_not_overwritten(self, classifier, dispatcher, settings, now):
        store = InMemoryBlobStore()
        messages = MessageRepository(store)
        agent = AssistantAgent(classifier, dispatcher, messages, settings)
        await agent.handle_message("안녕", now)
        before = await store.get("messages")

        store.get = AsyncMock(side_effect=ConnectionError("store unreachable"))
        reply = await agent.handle_message("두번째", now)

        assert reply.text == GENERIC_ERROR_TEXT
        dispatcher.dispatch.assert_awaited_once()
        assert store._data["messages"] == before
