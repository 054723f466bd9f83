"""Pydantic models for messages, model content blocks and wire events.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Message: Display-level chat message
    - ChatRequest: Incoming chat request payload
    - ModelMessage: Conversation turn as sent to the model, with content blocks
    - WireEvent: Tagged union of events sent over the SSE stream
"""

from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
    WireEvent,
)
from toolchat.models.schemas import (
    ChatRequest,
    ContentBlock,
    Message,
    ModelMessage,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

__all__ = [
    "ChatRequest",
    "ContentBlock",
    "DoneEvent",
    "ErrorEvent",
    "MaxRoundsEvent",
    "Message",
    "ModelMessage",
    "TextBlock",
    "TextEvent",
    "ToolEndEvent",
    "ToolResultBlock",
    "ToolStartEvent",
    "ToolUseBlock",
    "WireEvent",
]
