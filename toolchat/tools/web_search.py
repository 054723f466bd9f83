"""Web search via the DuckDuckGo Instant Answer API."""

import logging

import httpx

logger = logging.getLogger(__name__)

SEARCH_API_URL = "https://api.duckduckgo.com/"
MAX_RELATED_RESULTS = 5


async def web_search(client: httpx.AsyncClient, query: str) -> str:
    """Search the web and summarize the instant answer.

    Args:
        client: Shared HTTP client.
        query: The search query.

    Returns:
        A summary paragraph and related results, or an explanatory
        failure string. Never raises for HTTP or decoding errors.
    """
    params = {"q": query, "format": "json", "no_html": "1"}
    try:
        response = await client.get(SEARCH_API_URL, params=params)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Search failed for {query!r}: {e}")
        return f"Search failed: {e}"

    results = ""
    if abstract := data.get("Abstract"):
        results += f"Summary: {abstract}\n\n"

    related = data.get("RelatedTopics") or []
    if related:
        results += "Related results:\n"
        for topic in related[:MAX_RELATED_RESULTS]:
            if text := topic.get("Text"):
                results += f"- {text}\n"

    return results or "No results found for this query."
