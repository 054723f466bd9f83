"""Unit tests for wire events, request schemas and SSE encoding."""

import pytest
from pydantic import ValidationError

from toolchat.api.sse import encode_event
from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
    event_payload,
    parse_event,
)
from toolchat.models.schemas import ChatRequest, Message, ModelMessage, ToolResultBlock


class TestWireEvents:
    """Tests for event payloads and tag-based parsing."""

    def test_payload_excludes_tag_and_uses_camel_case(self) -> None:
        """Payloads carry fields only, with camelCase names."""
        assert event_payload(DoneEvent(token_count=42)) == {"tokenCount": 42}
        assert event_payload(MaxRoundsEvent(rounds=3, token_count=7)) == {
            "rounds": 3,
            "tokenCount": 7,
        }

    def test_parse_event_by_tag(self) -> None:
        """The tag selects the variant."""
        assert parse_event("text", {"text": "hi"}) == TextEvent(text="hi")
        assert parse_event("done", {"tokenCount": 5}) == DoneEvent(token_count=5)
        assert parse_event("tool_end", {"name": "web_search"}) == ToolEndEvent(name="web_search")

    def test_parse_unknown_tag_rejected(self) -> None:
        """Unknown tags raise instead of being ignored."""
        with pytest.raises(ValidationError):
            parse_event("thinking", {"text": "hmm"})

    def test_parse_extra_field_rejected(self) -> None:
        """Payloads with fields the variant does not define are rejected."""
        with pytest.raises(ValidationError):
            parse_event("error", {"message": "boom", "code": 500})

    def test_negative_token_count_rejected(self) -> None:
        """Token counts cannot be negative."""
        with pytest.raises(ValidationError):
            DoneEvent(token_count=-1)


class TestEncodeEvent:
    """Tests for SSE frame serialization."""

    def test_text_frame(self) -> None:
        """A frame is the event line, the data line and a blank line."""
        assert encode_event(TextEvent(text="hi")) == b'event: text\ndata: {"text":"hi"}\n\n'

    def test_tool_start_frame(self) -> None:
        """Tool input is nested JSON."""
        frame = encode_event(ToolStartEvent(name="get_weather", input={"location": "Paris"}))

        assert frame == (
            b'event: tool_start\ndata: {"name":"get_weather","input":{"location":"Paris"}}\n\n'
        )

    def test_done_frame_uses_alias(self) -> None:
        """done serializes its token count as tokenCount."""
        assert encode_event(DoneEvent(token_count=12)) == b'event: done\ndata: {"tokenCount":12}\n\n'

    def test_non_ascii_kept_as_utf8(self) -> None:
        """Non-ASCII text is sent as UTF-8, not escaped."""
        frame = encode_event(TextEvent(text="Zürich ☀"))

        assert "Zürich ☀".encode() in frame

    def test_newlines_stay_inside_json(self) -> None:
        """Multi-line text never breaks the frame into extra lines."""
        frame = encode_event(ErrorEvent(message="line one\nline two"))

        assert frame.count(b"\n") == 3


class TestChatRequest:
    """Tests for the chat endpoint request schema."""

    def test_valid_request(self) -> None:
        """Messages and system prompt are accepted."""
        request = ChatRequest(
            messages=[Message(role="user", content="Hello")],
            system="Be brief.",
        )

        assert request.messages[0].content == "Hello"
        assert request.session_id is None

    def test_empty_messages_rejected(self) -> None:
        """At least one message is required."""
        with pytest.raises(ValidationError):
            ChatRequest(messages=[])

    def test_invalid_role_rejected(self) -> None:
        """Only user and assistant roles are allowed."""
        with pytest.raises(ValidationError):
            ChatRequest(messages=[{"role": "system", "content": "x"}])

    def test_blank_session_id_becomes_none(self) -> None:
        """A whitespace session id is treated as absent."""
        request = ChatRequest(messages=[{"role": "user", "content": "x"}], session_id="  ")

        assert request.session_id is None


class TestModelMessage:
    """Tests for model-facing conversation turns."""

    def test_from_message(self) -> None:
        """Display messages convert to plain-text model turns."""
        turn = ModelMessage.from_message(Message(role="assistant", content="Hi"))

        assert turn.to_param() == {"role": "assistant", "content": "Hi"}

    def test_tool_result_param(self) -> None:
        """Tool results serialize in the Messages API block shape."""
        turn = ModelMessage(
            role="user",
            content=[ToolResultBlock(tool_use_id="toolu_1", content="sunny")],
        )

        assert turn.to_param() == {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "toolu_1", "content": "sunny"}],
        }
