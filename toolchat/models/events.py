"""Wire events exchanged over the chat SSE stream.

Each event travels as one SSE frame whose ``event:`` field is the tag and
whose ``data:`` field is the JSON body without the tag. Field names on the
wire are camelCase.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class TextEvent(_WireModel):
    """A piece of assistant text, relayed as soon as the model produces it.

    Attributes:
        text: The text delta, unmerged.
    """

    type: Literal["text"] = "text"
    text: str


class ToolStartEvent(_WireModel):
    """A tool is about to run.

    Attributes:
        name: Tool name as requested by the model.
        input: Tool arguments as requested by the model.
    """

    type: Literal["tool_start"] = "tool_start"
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolEndEvent(_WireModel):
    """The most recently started tool finished, successfully or not.

    Attributes:
        name: Name of the tool that finished.
    """

    type: Literal["tool_end"] = "tool_end"
    name: str


class DoneEvent(_WireModel):
    """Normal end of an exchange.

    Attributes:
        token_count: Sum of input and output tokens over every model call
            made during the exchange (tokenCount on the wire).
    """

    type: Literal["done"] = "done"
    token_count: int = Field(alias="tokenCount", ge=0)


class ErrorEvent(_WireModel):
    """Abnormal end of an exchange. No done event follows.

    Attributes:
        message: Description of the failure.
    """

    type: Literal["error"] = "error"
    message: str


class MaxRoundsEvent(_WireModel):
    """The exchange hit the configured round limit before the model finished.

    Attributes:
        rounds: Model calls made before stopping.
        token_count: Tokens used by those calls (tokenCount on the wire).
    """

    type: Literal["max_rounds"] = "max_rounds"
    rounds: int = Field(ge=1)
    token_count: int = Field(alias="tokenCount", ge=0)


WireEvent = Annotated[
    TextEvent | ToolStartEvent | ToolEndEvent | DoneEvent | ErrorEvent | MaxRoundsEvent,
    Field(discriminator="type"),
]

TERMINAL_EVENTS = (DoneEvent, ErrorEvent, MaxRoundsEvent)

wire_event_adapter: TypeAdapter[WireEvent] = TypeAdapter(WireEvent)


def event_payload(event: WireEvent) -> dict[str, Any]:
    """Return the JSON body of an event, without its tag."""
    return event.model_dump(mode="json", by_alias=True, exclude={"type"})


def parse_event(tag: str, payload: dict[str, Any]) -> WireEvent:
    """Build a wire event from its tag and JSON body.

    Raises:
        pydantic.ValidationError: If the tag is unknown or the body does not
            match the tagged variant.
    """
    return wire_event_adapter.validate_python({**payload, "type": tag})
