"""Tool declarations sent to the model with every call."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ToolName(StrEnum):
    """The closed set of tools the model may request."""

    WEB_SEARCH = "web_search"
    GET_WEATHER = "get_weather"
    WEB_FETCH = "web_fetch"


class WebSearchInput(BaseModel):
    query: str = Field(..., min_length=1)


class GetWeatherInput(BaseModel):
    location: str = Field(..., min_length=1)


class WebFetchInput(BaseModel):
    url: str = Field(..., min_length=1)


TOOL_DECLARATIONS: list[dict[str, Any]] = [
    {
        "name": ToolName.WEB_SEARCH.value,
        "description": (
            "Search the web for current information. Use this when you need to find "
            "up-to-date information, news, or facts that may not be in your training data."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to look up",
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": ToolName.GET_WEATHER.value,
        "description": (
            "Get current weather information for a location. "
            "Use this when the user asks about weather conditions."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": (
                        "The city or location to get weather for "
                        "(e.g., 'London', 'New York', 'Tokyo')"
                    ),
                },
            },
            "required": ["location"],
        },
    },
    {
        "name": ToolName.WEB_FETCH.value,
        "description": (
            "Fetch the content of a web page. "
            "Use this when you need to read the content of a specific URL."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "The URL to fetch content from",
                },
            },
            "required": ["url"],
        },
    },
]
