"""Client side of the chat stream.

Responsibilities:
    - Opening an exchange and decoding its SSE stream incrementally
    - Folding events into live text, tool notes and the final message
    - Persisting sessions, the active session and the theme

Used by the NiceGUI interface; independent of any UI toolkit.
"""

from toolchat.client.consumer import ExchangeResult, ExchangeState, StreamConsumer
from toolchat.client.errors import (
    ChatClientError,
    NoBody,
    ProtocolError,
    RequestFailed,
    StreamError,
)
from toolchat.client.sse import SSEDecoder, stream_chat
from toolchat.client.storage import Session, SessionStore

__all__ = [
    "ChatClientError",
    "ExchangeResult",
    "ExchangeState",
    "NoBody",
    "ProtocolError",
    "RequestFailed",
    "SSEDecoder",
    "Session",
    "SessionStore",
    "StreamConsumer",
    "StreamError",
    "stream_chat",
]
