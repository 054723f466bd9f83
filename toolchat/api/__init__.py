"""FastAPI endpoints for the chat assistant.

Streams each chat exchange as Server-Sent Events, one frame per wire event.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Run one exchange and stream its events
"""

from toolchat.api.app import app, create_app

__all__ = ["app", "create_app"]
