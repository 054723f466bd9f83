"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - clean_env: Removes model configuration variables from the environment
    - app: Fresh FastAPI application with its own stream registry
    - async_client: HTTPX client for API testing
    - mock_session_id: Consistent session ID for tests
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from toolchat.api.app import create_app

CONFIG_ENV_VARS = (
    "LLM_API_KEY",
    "ANTHROPIC_API_KEY",
    "LLM_BASE_URL",
    "LLM_MODEL",
    "LLM_MAX_TOKENS",
    "CHAT_MAX_ROUNDS",
    "TOOL_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Clear agent configuration variables for the duration of a test.

    Returns:
        The monkeypatch fixture, for setting variables in the test.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mock_session_id() -> str:
    """Generate consistent session ID for testing.

    Returns:
        Predictable session ID for test assertions.
    """
    return "test-session-12345"


@pytest.fixture
def app() -> FastAPI:
    """Create an application instance isolated from other tests."""
    return create_app()


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
