from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Message(BaseModel):
    """A display-level chat message.

    Attributes:
        role: The speaker, either user or assistant.
        content: The message text.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request payload for the chat streaming endpoint.

    Attributes:
        messages: Conversation so far, ending with the new user message.
        system: System prompt for the model.
        session_id: Optional conversation id used to reject concurrent exchanges.
    """

    messages: list[Message] = Field(..., min_length=1)
    system: str = ""
    session_id: str | None = None

    @field_validator("session_id", mode="before")
    @classmethod
    def blank_session_to_none(cls, v: str | None) -> str | None:
        """Treat an empty session id as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TextBlock(BaseModel):
    """Assistant text inside a model turn.

    Attributes:
        text: The text content.
    """

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    """A model request to invoke a named tool.

    The id must be echoed back in the matching ToolResultBlock.
    """

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """Textual outcome of one tool call, correlated by tool_use_id."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str


ContentBlock = Annotated[
    TextBlock | ToolUseBlock | ToolResultBlock,
    Field(discriminator="type"),
]


class ModelMessage(BaseModel):
    """One turn of the conversation as sent to the model.

    Assistant turns may carry text and tool-use blocks, user turns may carry
    tool results. Lives only for the duration of one exchange.
    """

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]

    @classmethod
    def from_message(cls, message: Message) -> "ModelMessage":
        return cls(role=message.role, content=message.content)

    def to_param(self) -> dict[str, Any]:
        """Serialize to the Messages API parameter shape."""
        return self.model_dump(mode="json")
