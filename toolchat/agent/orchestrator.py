"""Multi-round tool-use orchestration loop.

Drives repeated model calls interleaved with tool execution for one
exchange and emits a flat, strictly ordered sequence of wire events:

1. Call the model and relay every text delta immediately.
2. Add the call's input and output tokens to a running total.
3. If the model finished (end_turn) or asked for no tools, emit ``done``.
4. Otherwise record the assistant turn, run each requested tool in order
   (``tool_start``, execute, ``tool_end``), record one user turn holding
   all results, and go back to 1.

Any exception ends the exchange with a single ``error`` event.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any, Protocol

from toolchat.agent.config import AgentConfig, get_agent_config
from toolchat.agent.model_adapter import ModelCallAdapter, ModelStreamItem, ModelTurn, TextDelta
from toolchat.models.events import (
    DoneEvent,
    ErrorEvent,
    MaxRoundsEvent,
    TextEvent,
    ToolEndEvent,
    ToolStartEvent,
    WireEvent,
)
from toolchat.models.schemas import ModelMessage, ToolResultBlock
from toolchat.tools.declarations import TOOL_DECLARATIONS
from toolchat.tools.executor import ToolExecutor

logger = logging.getLogger(__name__)


class ModelCaller(Protocol):
    def stream(
        self,
        history: list[ModelMessage],
        system: str,
        tools: list[dict[str, Any]],
    ) -> AsyncGenerator[ModelStreamItem]: ...

    async def aclose(self) -> None: ...


class ToolRunner(Protocol):
    async def execute(self, name: str, tool_input: dict[str, Any]) -> str: ...

    async def aclose(self) -> None: ...


class IncompleteModelStream(RuntimeError):
    """The model stream ended without a final message."""


class ChatOrchestrator:
    """Runs exchanges against a model caller and a tool runner.

    Holds no per-exchange state; one instance serves all concurrent
    exchanges.
    """

    def __init__(
        self,
        model: ModelCaller,
        tools: ToolRunner,
        declarations: list[dict[str, Any]] | None = None,
        max_rounds: int = 0,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            model: Adapter performing one streamed model call per round.
            tools: Executor turning tool-use requests into text results.
            declarations: Tool declarations offered to the model.
            max_rounds: Maximum model calls per exchange, 0 for no limit.
        """
        self._model = model
        self._tools = tools
        self._declarations = TOOL_DECLARATIONS if declarations is None else declarations
        self._max_rounds = max_rounds

    async def aclose(self) -> None:
        """Release the model and tool HTTP clients."""
        await self._model.aclose()
        await self._tools.aclose()

    async def run(
        self,
        history: list[ModelMessage],
        system: str,
    ) -> AsyncGenerator[WireEvent]:
        """Run one exchange.

        Args:
            history: Conversation so far, ending with the user's message.
                Not modified; the loop works on a copy.
            system: System prompt.

        Yields:
            Wire events in emission order. The last event is always
            ``done``, ``error`` or ``max_rounds``.
        """
        history = list(history)
        token_count = 0
        rounds = 0

        try:
            while True:
                if self._max_rounds and rounds >= self._max_rounds:
                    logger.warning(f"Exchange stopped after {rounds} rounds")
                    yield MaxRoundsEvent(rounds=rounds, token_count=token_count)
                    return

                rounds += 1
                logger.info(f"Round {rounds}: calling model with {len(history)} messages")

                turn: ModelTurn | None = None
                async for item in self._model.stream(history, system, self._declarations):
                    if isinstance(item, TextDelta):
                        yield TextEvent(text=item.text)
                    else:
                        turn = item

                if turn is None:
                    raise IncompleteModelStream("Model stream ended without a final message")

                token_count += turn.total_tokens
                tool_uses = turn.tool_uses

                if turn.is_end_turn or not tool_uses:
                    logger.info(f"Exchange complete after {rounds} rounds, {token_count} tokens")
                    yield DoneEvent(token_count=token_count)
                    return

                history.append(ModelMessage(role="assistant", content=turn.content))

                results: list[ToolResultBlock] = []
                for tool_use in tool_uses:
                    logger.info(f"Running tool {tool_use.name} ({tool_use.id})")
                    yield ToolStartEvent(name=tool_use.name, input=tool_use.input)
                    content = await self._tools.execute(tool_use.name, tool_use.input)
                    yield ToolEndEvent(name=tool_use.name)
                    results.append(ToolResultBlock(tool_use_id=tool_use.id, content=content))

                history.append(ModelMessage(role="user", content=results))

        except Exception as e:
            logger.exception(f"Exchange failed in round {rounds}")
            yield ErrorEvent(message=str(e) or e.__class__.__name__)


def create_orchestrator(config: AgentConfig | None = None) -> ChatOrchestrator:
    """Create an orchestrator wired to the Anthropic API and the HTTP tools.

    Args:
        config: Optional agent configuration.
                Loads from environment if not provided.

    Returns:
        A ready ChatOrchestrator.
    """
    config = config or get_agent_config()
    return ChatOrchestrator(
        model=ModelCallAdapter(config),
        tools=ToolExecutor(timeout=config.tool_timeout, fetch_max_chars=config.fetch_max_chars),
        max_rounds=config.max_rounds,
    )
