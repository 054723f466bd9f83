"""Model call adapter over the Anthropic Messages streaming API.

One call to ``stream`` is one model call: text deltas are yielded as they
arrive, followed by a single ModelTurn carrying the full content blocks,
the stop reason and token usage.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from anthropic import AsyncAnthropic
from pydantic import BaseModel, Field

from toolchat.agent.config import AgentConfig
from toolchat.models.schemas import ContentBlock, ModelMessage, TextBlock, ToolUseBlock

logger = logging.getLogger(__name__)

STOP_END_TURN = "end_turn"


class TextDelta(BaseModel):
    """An incremental piece of assistant text."""

    text: str


class ModelTurn(BaseModel):
    """Final aggregate of one model call.

    Attributes:
        content: Text and tool-use blocks in the order the model emitted them.
        stop_reason: Why the model stopped, e.g. end_turn or tool_use.
        input_tokens: Prompt tokens billed for this call.
        output_tokens: Completion tokens billed for this call.
    """

    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def is_end_turn(self) -> bool:
        return self.stop_reason == STOP_END_TURN

    @classmethod
    def from_message(cls, message: Any) -> "ModelTurn":
        """Build a turn from an SDK final message.

        Blocks other than text and tool_use (e.g. thinking) are dropped.
        """
        blocks: list[ContentBlock] = []
        for block in message.content:
            if block.type == "text":
                blocks.append(TextBlock(text=block.text))
            elif block.type == "tool_use":
                blocks.append(ToolUseBlock(id=block.id, name=block.name, input=dict(block.input or {})))
        usage = message.usage
        return cls(
            content=blocks,
            stop_reason=message.stop_reason,
            input_tokens=usage.input_tokens or 0,
            output_tokens=usage.output_tokens or 0,
        )


ModelStreamItem = TextDelta | ModelTurn


class ModelCallAdapter:
    """Wraps a single streamed call to the upstream model."""

    def __init__(self, config: AgentConfig, client: AsyncAnthropic | None = None) -> None:
        """Initialize the adapter.

        Args:
            config: Agent configuration with credentials and model settings.
            client: Optional preconfigured SDK client.
        """
        self._config = config
        self._client = client or AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
        )

    async def stream(
        self,
        history: list[ModelMessage],
        system: str,
        tools: list[dict[str, Any]],
    ) -> AsyncGenerator[ModelStreamItem]:
        """Stream one model call.

        Args:
            history: Conversation so far, including tool turns.
            system: System prompt; omitted from the call when empty.
            tools: Tool declarations offered to the model.

        Yields:
            TextDelta items as text arrives, then exactly one ModelTurn.
        """
        call_kwargs: dict[str, Any] = {
            "model": self._config.model_name,
            "max_tokens": self._config.max_tokens,
            "messages": [message.to_param() for message in history],
        }
        if system:
            call_kwargs["system"] = system
        if tools:
            call_kwargs["tools"] = tools

        async with self._client.messages.stream(**call_kwargs) as stream:
            async for text in stream.text_stream:
                if text:
                    yield TextDelta(text=text)
            final = await stream.get_final_message()

        turn = ModelTurn.from_message(final)
        logger.debug(
            f"Model call finished: stop_reason={turn.stop_reason}, "
            f"tokens={turn.input_tokens}+{turn.output_tokens}"
        )
        yield turn

    async def aclose(self) -> None:
        await self._client.close()
