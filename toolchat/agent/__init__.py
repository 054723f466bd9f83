"""Model orchestration for the chat assistant.

Responsibilities:
    - Configuration from environment (.env supported)
    - One streamed model call per round via the Anthropic SDK
    - The multi-round loop interleaving model calls with tool execution
    - Token accounting across every round of an exchange

Stateless with respect to conversations: history comes in with each
exchange and is discarded afterwards.
"""

from toolchat.agent.config import AgentConfig, get_agent_config
from toolchat.agent.model_adapter import ModelCallAdapter, ModelTurn, TextDelta
from toolchat.agent.orchestrator import ChatOrchestrator, create_orchestrator

__all__ = [
    "AgentConfig",
    "ChatOrchestrator",
    "ModelCallAdapter",
    "ModelTurn",
    "TextDelta",
    "create_orchestrator",
    "get_agent_config",
]
