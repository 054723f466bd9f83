"""Tools the model can call mid-conversation.

Each tool takes typed input and returns plain text, including on failure.

Tools:
    - web_search: DuckDuckGo instant answers
    - get_weather: Open-Meteo current conditions
    - web_fetch: Page content as text, truncated
"""

from toolchat.tools.declarations import TOOL_DECLARATIONS, ToolName
from toolchat.tools.executor import ToolExecutor

__all__ = ["TOOL_DECLARATIONS", "ToolExecutor", "ToolName"]
