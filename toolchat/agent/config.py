"""Agent configuration with environment variable loading.

Pydantic-based configuration for the model adapter, orchestration loop
and tools. Supports the Anthropic API and compatible proxies via a custom
base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class AgentConfig(BaseModel):
    """Configuration for the chat agent.

    Attributes:
        api_key: API key for model access.
        base_url: API base URL (None for the SDK default).
        model_name: Model identifier to use.
        max_tokens: Maximum tokens generated per model call.
        max_rounds: Maximum model calls per exchange (0 = unbounded).
        tool_timeout: Seconds a single tool call may take.
        fetch_max_chars: Characters kept from a fetched page.
    """

    # Environment values are strings; validating defaults coerces and checks them
    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("ANTHROPIC_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for provider default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "claude-opus-4-5"),
        description="Model to use",
    )
    max_tokens: int = Field(
        default_factory=lambda: os.getenv("LLM_MAX_TOKENS", "8192"),
        ge=1,
        le=200000,
        description="Maximum tokens in generated response",
    )
    max_rounds: int = Field(
        default_factory=lambda: os.getenv("CHAT_MAX_ROUNDS", "10"),
        ge=0,
        description="Maximum model calls per exchange, 0 for no limit",
    )
    tool_timeout: float = Field(
        default_factory=lambda: os.getenv("TOOL_TIMEOUT", "30"),
        gt=0,
        description="Timeout in seconds for a single tool call",
    )
    fetch_max_chars: int = Field(
        default=10000,
        ge=1,
        description="Maximum characters returned by web_fetch",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY or ANTHROPIC_API_KEY in .env"
            )
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
