"""Fetch a web page and reduce it to readable text."""

import json
import logging
import re

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 10000
TRUNCATION_MARKER = "..."

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(html: str) -> str:
    """Drop scripts, styles and tags, then collapse whitespace."""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


async def web_fetch(
    client: httpx.AsyncClient,
    url: str,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> str:
    """Fetch a URL and return its content as text.

    JSON bodies are pretty-printed, HTML is stripped to text, anything else
    is returned as-is. The result is cut to ``max_chars`` characters.

    Args:
        client: Shared HTTP client.
        url: The URL to fetch.
        max_chars: Maximum characters kept before the truncation marker.

    Returns:
        Page text, or an explanatory failure string.
    """
    try:
        response = await client.get(url, follow_redirects=True)
        if not response.is_success:
            return f"Failed to fetch: {response.status_code} {response.reason_phrase}"

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            text = json.dumps(response.json(), indent=2, ensure_ascii=False)
        elif "text/html" in content_type:
            text = strip_html(response.text)
        else:
            text = response.text
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.warning(f"Fetch failed for {url}: {e}")
        return f"Fetch failed: {e}"

    return truncate(text, max_chars)
