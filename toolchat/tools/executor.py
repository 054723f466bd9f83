"""Tool executor: dispatches a model tool-use request to one of the fixed tools.

Tool failures never propagate. Every outcome, including unknown tool
names, invalid input and timeouts, comes back as text so the model can
see what went wrong and adapt.
"""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from toolchat.tools.declarations import (
    GetWeatherInput,
    ToolName,
    WebFetchInput,
    WebSearchInput,
)
from toolchat.tools.weather import get_weather
from toolchat.tools.web_fetch import DEFAULT_MAX_CHARS, web_fetch
from toolchat.tools.web_search import web_search

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 30.0
USER_AGENT = "toolchat/0.1"


class ToolExecutor:
    """Execute tools with a timeout over a shared HTTP client."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TOOL_TIMEOUT,
        fetch_max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": USER_AGENT},
        )
        self._timeout = timeout
        self._fetch_max_chars = fetch_max_chars

    async def aclose(self) -> None:
        await self._client.aclose()

    async def execute(self, name: str, tool_input: dict[str, Any]) -> str:
        """Run one tool and return its textual result.

        Args:
            name: Tool name as requested by the model.
            tool_input: Tool arguments as requested by the model.

        Returns:
            The tool output, or a descriptive error string.
        """
        try:
            tool = ToolName(name)
        except ValueError:
            logger.warning(f"Model requested unknown tool: {name}")
            return f"Unknown tool: {name}"

        try:
            return await asyncio.wait_for(self._dispatch(tool, tool_input), timeout=self._timeout)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(f"Invalid input for {name}: {errors}")
            return f"Invalid input for {name}: {errors}"
        except TimeoutError:
            logger.warning(f"Tool {name} timed out after {self._timeout:g}s")
            return f"Tool {name} timed out after {self._timeout:g}s"
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return f"Tool {name} failed: {e}"

    async def _dispatch(self, tool: ToolName, tool_input: dict[str, Any]) -> str:
        match tool:
            case ToolName.WEB_SEARCH:
                args = WebSearchInput.model_validate(tool_input)
                return await web_search(self._client, args.query)
            case ToolName.GET_WEATHER:
                args = GetWeatherInput.model_validate(tool_input)
                return await get_weather(self._client, args.location)
            case ToolName.WEB_FETCH:
                args = WebFetchInput.model_validate(tool_input)
                return await web_fetch(self._client, args.url, self._fetch_max_chars)
