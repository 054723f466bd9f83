"""Unit tests for the client stream consumer."""

from collections.abc import AsyncGenerator

import httpx
import pytest

from toolchat.client.consumer import ExchangeState, StreamConsumer, tool_status, tool_summary
from toolchat.client.errors import RequestFailed
from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
    WireEvent,
)


async def events_from(*events: WireEvent, raises: Exception | None = None) -> AsyncGenerator[WireEvent]:
    for event in events:
        yield event
    if raises is not None:
        raise raises


class TestToolAnnotations:
    """Tests for tool status and summary lines."""

    @pytest.mark.parametrize(
        ("name", "tool_input", "status", "summary"),
        [
            ("web_search", {"query": "python"}, '*Searching for: "python"...*', '*Searched: "python"*'),
            ("get_weather", {"location": "Paris"}, "*Getting weather for: Paris...*", "*Weather lookup: Paris*"),
            ("web_fetch", {"url": "https://a.io"}, "*Fetching: https://a.io...*", "*Fetched: https://a.io*"),
            ("calculator", {}, "*Running calculator...*", "*Used calculator*"),
        ],
    )
    def test_annotations(self, name: str, tool_input: dict, status: str, summary: str) -> None:
        """Each tool has its own transient and permanent annotation."""
        assert tool_status(name, tool_input) == status
        assert tool_summary(name, tool_input) == summary


class TestStreamConsumer:
    """Tests for folding one exchange into an assistant message."""

    async def test_text_and_done(self) -> None:
        """Text is accumulated and the token total comes from done."""
        consumer = StreamConsumer()

        result = await consumer.consume(
            events_from(TextEvent(text="Hello"), TextEvent(text=" there"), DoneEvent(token_count=42))
        )

        assert result.message.role == "assistant"
        assert result.message.content == "Hello there"
        assert result.token_count == 42
        assert not result.failed
        assert consumer.state is ExchangeState.FINALIZED

    async def test_tool_round_annotations(self) -> None:
        """Status is shown while a tool runs and replaced by its summary."""
        views: list[str] = []
        consumer = StreamConsumer(on_update=views.append)

        result = await consumer.consume(
            events_from(
                TextEvent(text="Let me check."),
                ToolStartEvent(name="get_weather", input={"location": "Paris"}),
                ToolEndEvent(name="get_weather"),
                TextEvent(text="Sunny."),
                DoneEvent(token_count=10),
            )
        )

        assert "Let me check.\n\n*Getting weather for: Paris...*\n\n" in views
        assert result.message.content == "Let me check.\n\n*Weather lookup: Paris*\n\nSunny."

    async def test_consecutive_tool_notes_grouped(self) -> None:
        """Notes from one round share a block, one per line."""
        consumer = StreamConsumer()

        result = await consumer.consume(
            events_from(
                ToolStartEvent(name="web_search", input={"query": "x"}),
                ToolEndEvent(name="web_search"),
                ToolStartEvent(name="web_fetch", input={"url": "https://x.io"}),
                ToolEndEvent(name="web_fetch"),
                TextEvent(text="Found it."),
                DoneEvent(token_count=1),
            )
        )

        assert result.message.content == (
            '\n\n*Searched: "x"*\n*Fetched: https://x.io*\n\nFound it.'
        )

    async def test_events_after_done_ignored(self) -> None:
        """The exchange is final once done arrives."""
        consumer = StreamConsumer()

        result = await consumer.consume(
            events_from(TextEvent(text="A"), DoneEvent(token_count=1), TextEvent(text="B"))
        )

        assert result.message.content == "A"

    async def test_error_event_keeps_partial_text(self) -> None:
        """An error event commits the partial text followed by the error."""
        consumer = StreamConsumer()

        result = await consumer.consume(
            events_from(TextEvent(text="Partial answer"), ErrorEvent(message="Overloaded"))
        )

        assert result.failed
        assert result.error == "Overloaded"
        assert result.token_count is None
        assert result.message.content == "Partial answer\n\nError: Overloaded"
        assert consumer.state is ExchangeState.FAILED

    async def test_error_without_text(self) -> None:
        """With no partial text the message is the error alone."""
        result = await StreamConsumer().consume(events_from(ErrorEvent(message="boom")))

        assert result.message.content == "Error: boom"

    async def test_max_rounds_is_failure(self) -> None:
        """A round-limit ending is reported as a failed exchange."""
        result = await StreamConsumer().consume(
            events_from(MaxRoundsEvent(rounds=3, token_count=100))
        )

        assert result.error == "Stopped after 3 tool rounds without a final answer"

    async def test_stream_ends_without_terminal(self) -> None:
        """A stream closing early fails the exchange."""
        result = await StreamConsumer().consume(events_from(TextEvent(text="Half")))

        assert result.error == "Stream ended before the exchange completed"
        assert result.message.content == "Half\n\nError: Stream ended before the exchange completed"

    async def test_unmatched_tool_end(self) -> None:
        """A tool_end without its tool_start is a protocol failure."""
        result = await StreamConsumer().consume(events_from(ToolEndEvent(name="web_fetch")))

        assert result.failed
        assert "without a matching tool_start" in result.error

    async def test_request_failure(self) -> None:
        """Errors raised by the event source become failed results."""
        result = await StreamConsumer().consume(events_from(raises=RequestFailed(500)))

        assert result.message.content == "Error: Chat request failed: 500"

    async def test_transport_failure(self) -> None:
        """Network errors mid-stream keep the text received so far."""
        result = await StreamConsumer().consume(
            events_from(TextEvent(text="So far"), raises=httpx.ReadError("Connection reset"))
        )

        assert result.message.content == "So far\n\nError: Connection reset"

    async def test_consumer_runs_once(self) -> None:
        """A consumer handles exactly one exchange."""
        consumer = StreamConsumer()
        await consumer.consume(events_from(DoneEvent(token_count=0)))

        with pytest.raises(RuntimeError):
            await consumer.consume(events_from(DoneEvent(token_count=0)))
