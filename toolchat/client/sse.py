"""Incremental SSE decoding and the chat stream opener.

Transport chunks are not aligned to event boundaries: a frame, a line or
even a multi-byte character may be split across reads. SSEDecoder keeps
the unfinished tail and the pending event tag between calls to ``feed``.
"""

import codecs
import json
import logging
from collections.abc import AsyncGenerator, Sequence

import httpx
from pydantic import ValidationError

from toolchat.client.errors import NoBody, ProtocolError, RequestFailed
from toolchat.models.events import WireEvent, parse_event
from toolchat.models.schemas import Message

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"
EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "


class SSEDecoder:
    """Turns a chunked SSE byte stream into wire events."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self._pending_event: str | None = None

    def feed(self, chunk: bytes | str) -> list[WireEvent]:
        """Consume one chunk and return the events it completed.

        Raises:
            ProtocolError: On malformed JSON, unknown tags or orphan data lines.
        """
        text = self._utf8.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return self._process(lines)

    def close(self) -> list[WireEvent]:
        """Flush the decoder at end of stream.

        Returns events completed by a final line lacking its newline.
        """
        self._buffer += self._utf8.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return self._process([tail]) if tail else []

    def _process(self, lines: list[str]) -> list[WireEvent]:
        events: list[WireEvent] = []
        for raw in lines:
            line = raw.removesuffix("\r")
            if line.startswith(EVENT_PREFIX):
                self._pending_event = line[len(EVENT_PREFIX):].strip()
            elif line.startswith(DATA_PREFIX):
                events.append(self._decode_data(line[len(DATA_PREFIX):]))
            # Blank lines separate frames; comments and other fields are ignored
        return events

    def _decode_data(self, data: str) -> WireEvent:
        tag = self._pending_event
        if tag is None:
            raise ProtocolError(f"Data line without an event tag: {data[:80]!r}")
        self._pending_event = None

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Malformed JSON in {tag!r} event: {e}") from e
        if not isinstance(payload, dict):
            raise ProtocolError(f"Expected a JSON object in {tag!r} event")

        try:
            return parse_event(tag, payload)
        except ValidationError as e:
            raise ProtocolError(f"Invalid {tag!r} event: {e.errors()[0]['msg']}") from e


async def stream_chat(
    client: httpx.AsyncClient,
    messages: Sequence[Message],
    system: str,
    session_id: str | None = None,
    url: str = CHAT_PATH,
) -> AsyncGenerator[WireEvent]:
    """Open one chat exchange and yield its events as they arrive.

    Args:
        client: HTTP client, typically with base_url pointing at the API.
        messages: Conversation including the new user message.
        system: System prompt.
        session_id: Conversation id, lets the server reject concurrent exchanges.
        url: Chat endpoint path.

    Yields:
        Decoded wire events in stream order.

    Raises:
        RequestFailed: The endpoint answered with a non-success status.
        NoBody: The response carried no body.
        ProtocolError: The stream violated the wire protocol.
    """
    payload: dict[str, object] = {
        "messages": [message.model_dump() for message in messages],
        "system": system,
    }
    if session_id is not None:
        payload["session_id"] = session_id

    async with client.stream(
        "POST",
        url,
        json=payload,
        headers={"Accept": "text/event-stream"},
    ) as response:
        if not response.is_success:
            logger.warning(f"Chat request failed with status {response.status_code}")
            raise RequestFailed(response.status_code)

        decoder = SSEDecoder()
        received = False
        async for chunk in response.aiter_bytes():
            if chunk:
                received = True
            for event in decoder.feed(chunk):
                yield event
        if not received:
            raise NoBody()
        for event in decoder.close():
            yield event
