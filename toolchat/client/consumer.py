"""Client stream consumer: folds one exchange's events into conversation state.

State machine for one exchange::

    IDLE -> STREAMING -> FINALIZED | FAILED

Text is accumulated and republished after every event for progressive
rendering. Tool starts show a transient status line; tool ends leave a
short permanent note in the text. On failure the partial text is still
committed, followed by the error, so nothing is lost silently.
"""

import logging
from collections import deque
from collections.abc import AsyncIterable, Callable
from enum import StrEnum
from typing import Any

import httpx
from pydantic import BaseModel

from toolchat.client.errors import ChatClientError, ProtocolError, StreamError
from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
    WireEvent,
)
from toolchat.models.schemas import Message
from toolchat.tools.declarations import ToolName

logger = logging.getLogger(__name__)


class ExchangeState(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    FAILED = "failed"


class ExchangeResult(BaseModel):
    """Outcome of one exchange.

    Attributes:
        message: Assistant message to append to the conversation.
        token_count: Session token total reported by the server, None on failure.
        error: Failure description, None on success.
    """

    message: Message
    token_count: int | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def tool_status(name: str, tool_input: dict[str, Any]) -> str:
    """Transient annotation shown while a tool runs."""
    match name:
        case ToolName.WEB_SEARCH:
            return f'*Searching for: "{tool_input.get("query", "")}"...*'
        case ToolName.GET_WEATHER:
            return f"*Getting weather for: {tool_input.get('location', '')}...*"
        case ToolName.WEB_FETCH:
            return f"*Fetching: {tool_input.get('url', '')}...*"
        case _:
            return f"*Running {name}...*"


def tool_summary(name: str, tool_input: dict[str, Any]) -> str:
    """Permanent annotation left in the text after a tool ran."""
    match name:
        case ToolName.WEB_SEARCH:
            return f'*Searched: "{tool_input.get("query", "")}"*'
        case ToolName.GET_WEATHER:
            return f"*Weather lookup: {tool_input.get('location', '')}*"
        case ToolName.WEB_FETCH:
            return f"*Fetched: {tool_input.get('url', '')}*"
        case _:
            return f"*Used {name}*"


class StreamConsumer:
    """Consumes the events of exactly one exchange."""

    def __init__(self, on_update: Callable[[str], None] | None = None) -> None:
        """Initialize the consumer.

        Args:
            on_update: Called with the live view after every event.
        """
        self._on_update = on_update
        self.state = ExchangeState.IDLE
        self.content = ""
        self.token_count: int | None = None
        self._pending_tools: deque[ToolStartEvent] = deque()
        self._in_tool_notes = False

    def _publish(self, view: str | None = None) -> None:
        if self._on_update is not None:
            self._on_update(self.content if view is None else view)

    def handle(self, event: WireEvent) -> None:
        """Fold one event into the running state.

        Raises:
            ProtocolError: On a tool_end with no matching tool_start.
            StreamError: On an error or max_rounds event.
        """
        match event:
            case TextEvent(text=text):
                self.content += text
                self._in_tool_notes = False
                self._publish()
            case ToolStartEvent(name=name, input=tool_input):
                self._pending_tools.append(event)
                self._publish(f"{self.content}\n\n{tool_status(name, tool_input)}\n\n")
            case ToolEndEvent(name=name):
                if not self._pending_tools or self._pending_tools[0].name != name:
                    raise ProtocolError(f"tool_end for {name!r} without a matching tool_start")
                started = self._pending_tools.popleft()
                self._append_tool_note(tool_summary(name, started.input))
                self._publish()
            case DoneEvent(token_count=token_count):
                self.token_count = token_count
                self.state = ExchangeState.FINALIZED
            case ErrorEvent(message=message):
                raise StreamError(message)
            case MaxRoundsEvent(rounds=rounds):
                raise StreamError(f"Stopped after {rounds} tool rounds without a final answer")

    def _append_tool_note(self, note: str) -> None:
        # Notes from one tool round share a single paragraph block
        if self._in_tool_notes:
            self.content = self.content.removesuffix("\n\n") + f"\n{note}\n\n"
        else:
            self.content += f"\n\n{note}\n\n"
        self._in_tool_notes = True

    async def consume(self, events: AsyncIterable[WireEvent]) -> ExchangeResult:
        """Drive the exchange to completion.

        Args:
            events: The exchange's event stream, e.g. from ``stream_chat``.

        Returns:
            The assistant message to commit, with the token total on success
            or the error description on failure.

        Raises:
            RuntimeError: If this consumer already ran an exchange.
        """
        if self.state is not ExchangeState.IDLE:
            raise RuntimeError(f"Exchange already {self.state.value}")
        self.state = ExchangeState.STREAMING
        self._publish()

        try:
            async for event in events:
                self.handle(event)
                if self.state is ExchangeState.FINALIZED:
                    break
            else:
                raise ProtocolError("Stream ended before the exchange completed")
        except (ChatClientError, httpx.HTTPError) as e:
            return self._fail(str(e) or e.__class__.__name__)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

        return ExchangeResult(
            message=Message(role="assistant", content=self.content),
            token_count=self.token_count,
        )

    def _fail(self, error: str) -> ExchangeResult:
        self.state = ExchangeState.FAILED
        logger.warning(f"Exchange failed: {error}")
        partial = self.content.rstrip()
        content = f"{partial}\n\nError: {error}" if partial else f"Error: {error}"
        self.content = content
        self._publish()
        return ExchangeResult(
            message=Message(role="assistant", content=content),
            error=error,
        )
