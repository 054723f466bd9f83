"""toolchat - streaming chat assistant with tool use.

Combines FastAPI for the SSE chat endpoint, the Anthropic SDK for model
calls, httpx for tools and the stream client, NiceGUI for the chat UI,
and Pydantic for data validation.

Components:
    - tools: Web search, weather and page fetch tools behind one executor
    - agent: Model call adapter and the multi-round orchestration loop
    - models: Messages, content blocks and wire events
    - api: HTTP endpoints and SSE encoding
    - client: SSE decoding, stream consumption and session storage
    - ui: Web interface for chat interactions
"""

__version__ = "0.1.0"
