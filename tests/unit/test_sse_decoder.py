"""Unit tests for the incremental SSE decoder.

Chunk boundaries are arbitrary in practice, so the decoder must produce
the same events however the byte stream is split.
"""

import pytest

from toolchat.api.sse import encode_event
from toolchat.client.errors import ProtocolError
from toolchat.client.sse import SSEDecoder
from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
)

EVENTS = [
    TextEvent(text="Héllo "),
    TextEvent(text="wörld 🌍"),
    ToolStartEvent(name="get_weather", input={"location": "São Paulo"}),
    ToolEndEvent(name="get_weather"),
    TextEvent(text="It is 25°C."),
    DoneEvent(token_count=1234),
]
STREAM = b"".join(encode_event(event) for event in EVENTS)


def decode_all(*chunks: bytes) -> list:
    decoder = SSEDecoder()
    events = []
    for chunk in chunks:
        events.extend(decoder.feed(chunk))
    events.extend(decoder.close())
    return events


class TestRoundTrip:
    """Encoding then decoding yields the original events."""

    @pytest.mark.parametrize(
        "event",
        [
            TextEvent(text="a\nb \"quoted\""),
            ToolStartEvent(name="web_fetch", input={"url": "https://example.com"}),
            ToolEndEvent(name="web_fetch"),
            DoneEvent(token_count=0),
            ErrorEvent(message="Rate limited"),
            MaxRoundsEvent(rounds=10, token_count=99),
        ],
    )
    def test_each_variant(self, event) -> None:
        """Every variant survives the wire."""
        assert decode_all(encode_event(event)) == [event]

    def test_whole_stream(self) -> None:
        """A stream decoded in one chunk gives all events in order."""
        assert decode_all(STREAM) == EVENTS


class TestChunkBoundaries:
    """Output is independent of how the bytes are chunked."""

    def test_split_at_every_offset(self) -> None:
        """Any two-way split decodes to the same events."""
        for offset in range(len(STREAM) + 1):
            assert decode_all(STREAM[:offset], STREAM[offset:]) == EVENTS, offset

    def test_one_byte_at_a_time(self) -> None:
        """Byte-by-byte delivery, splitting multi-byte characters, still decodes."""
        chunks = [STREAM[i : i + 1] for i in range(len(STREAM))]

        assert decode_all(*chunks) == EVENTS

    def test_frame_split_between_event_and_data(self) -> None:
        """The pending tag carries over to the next read."""
        decoder = SSEDecoder()

        assert decoder.feed(b"event: text\n") == []
        assert decoder.feed(b'data: {"text":"late"}\n\n') == [TextEvent(text="late")]

    def test_str_chunks_accepted(self) -> None:
        """Already-decoded text chunks work too."""
        decoder = SSEDecoder()

        assert decoder.feed(STREAM.decode()) == EVENTS

    def test_crlf_line_endings(self) -> None:
        """CRLF-terminated lines decode like LF ones."""
        assert decode_all(STREAM.replace(b"\n", b"\r\n")) == EVENTS

    def test_final_line_without_newline(self) -> None:
        """close() flushes a last data line missing its newline."""
        decoder = SSEDecoder()

        assert decoder.feed(b'event: done\ndata: {"tokenCount":3}') == []
        assert decoder.close() == [DoneEvent(token_count=3)]

    def test_comments_and_blank_lines_ignored(self) -> None:
        """Keep-alive comments and extra blank lines produce nothing."""
        assert decode_all(b": keep-alive\n\n\n" + STREAM) == EVENTS


class TestProtocolErrors:
    """Malformed frames fail fast."""

    def test_malformed_json(self) -> None:
        """Unparseable data is a protocol error."""
        with pytest.raises(ProtocolError, match="Malformed JSON"):
            decode_all(b"event: text\ndata: {oops\n\n")

    def test_unknown_tag(self) -> None:
        """Unknown event tags are rejected."""
        with pytest.raises(ProtocolError, match="Invalid 'reasoning' event"):
            decode_all(b'event: reasoning\ndata: {"text":"x"}\n\n')

    def test_orphan_data_line(self) -> None:
        """A data line with no preceding event line is rejected."""
        with pytest.raises(ProtocolError, match="without an event tag"):
            decode_all(b'data: {"text":"x"}\n\n')

    def test_non_object_payload(self) -> None:
        """Payloads must be JSON objects."""
        with pytest.raises(ProtocolError, match="Expected a JSON object"):
            decode_all(b"event: text\ndata: [1, 2]\n\n")

    def test_payload_mismatch(self) -> None:
        """A payload that does not fit its tag is rejected."""
        with pytest.raises(ProtocolError):
            decode_all(b'event: done\ndata: {"tokenCount":-5}\n\n')

    def test_tag_consumed_by_data(self) -> None:
        """Each event line covers exactly one data line."""
        with pytest.raises(ProtocolError, match="without an event tag"):
            decode_all(b'event: text\ndata: {"text":"a"}\ndata: {"text":"b"}\n\n')
