"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat with real HTTP requests over ASGITransport
    - Client stream_chat and StreamConsumer against the real app
    - Session guard and shutdown behavior

The upstream model is replaced by a scripted fake; everything between
the HTTP request and the decoded events is real.
"""
