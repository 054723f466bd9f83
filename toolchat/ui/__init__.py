"""NiceGUI interface - thin visualization layer for chat interactions.

Delivers a responsive web UI with live streaming of assistant output.

Responsibilities:
    - Chat message display with progressive rendering and tool status
    - Session list with per-session loading and unread markers
    - Context token usage in the header
    - Dark/light theme toggle, persisted per user

Contains no protocol logic. Delegates streaming to toolchat.client.
"""
