"""Client-side session persistence.

Sessions, the active session id and the theme are independent entries in
a key-value store (NiceGUI's ``app.storage.user`` in the UI, a plain dict
in tests). Malformed stored data degrades to empty or default values.
"""

import logging
import time
import uuid
from collections.abc import MutableMapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from toolchat.client.consumer import ExchangeResult
from toolchat.models.schemas import Message

logger = logging.getLogger(__name__)

MAX_TOKENS = 200000
SESSIONS_KEY = "chat_sessions"
CURRENT_SESSION_KEY = "chat_current_session"
THEME_KEY = "chat_theme"
DEFAULT_TITLE = "New Chat"
TITLE_LENGTH = 30

Theme = Literal["dark", "light"]


def generate_id() -> str:
    return uuid.uuid4().hex


def make_title(content: str) -> str:
    """Title a conversation after its first user message."""
    return content[:TITLE_LENGTH] + ("..." if len(content) > TITLE_LENGTH else "")


class Session(BaseModel):
    """A persisted conversation.

    Attributes:
        id: Unique session identifier.
        title: Sidebar title.
        messages: Conversation in order.
        token_count: Tokens used by the latest exchange, as reported by the server.
        created_at: Creation time in epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(default_factory=list)
    token_count: int = Field(default=0, alias="tokenCount", ge=0)
    created_at: int = Field(default_factory=lambda: int(time.time() * 1000), alias="createdAt")

    def with_user_message(self, content: str) -> "Session":
        """Append a user message, titling the session if it was empty."""
        title = make_title(content) if not self.messages else self.title
        return self.model_copy(
            update={
                "title": title,
                "messages": [*self.messages, Message(role="user", content=content)],
            }
        )

    def with_result(self, result: ExchangeResult) -> "Session":
        """Commit an exchange outcome.

        The reported token count replaces the stored one; failed exchanges
        keep the previous count.
        """
        update: dict[str, Any] = {"messages": [*self.messages, result.message]}
        if result.token_count is not None:
            update["token_count"] = result.token_count
        return self.model_copy(update=update)


_sessions_adapter = TypeAdapter(list[Session])


class SessionStore:
    """Reads and writes chat state in a key-value mapping."""

    def __init__(self, storage: MutableMapping[str, Any]) -> None:
        self._storage = storage

    def load_sessions(self) -> list[Session]:
        saved = self._storage.get(SESSIONS_KEY)
        if not saved:
            return []
        try:
            if isinstance(saved, (str, bytes)):
                return _sessions_adapter.validate_json(saved)
            return _sessions_adapter.validate_python(saved)
        except ValidationError as e:
            logger.error(f"Failed to load sessions: {e}")
            return []

    def save_sessions(self, sessions: list[Session]) -> None:
        self._storage[SESSIONS_KEY] = [
            session.model_dump(mode="json", by_alias=True) for session in sessions
        ]

    def load_current_session_id(self) -> str | None:
        current = self._storage.get(CURRENT_SESSION_KEY)
        return current if isinstance(current, str) else None

    def save_current_session_id(self, session_id: str) -> None:
        self._storage[CURRENT_SESSION_KEY] = session_id

    def load_theme(self, default: Theme = "dark") -> Theme:
        saved = self._storage.get(THEME_KEY)
        if saved in ("dark", "light"):
            return saved
        return default

    def save_theme(self, theme: Theme) -> None:
        self._storage[THEME_KEY] = theme

    def initialize(self) -> tuple[list[Session], Session]:
        """Load sessions and pick the active one.

        Creates and persists a fresh session when the stored active id is
        missing or unknown.

        Returns:
            All sessions (newest first) and the active session.
        """
        sessions = self.load_sessions()
        current_id = self.load_current_session_id()
        current = next((s for s in sessions if s.id == current_id), None)

        if current is None:
            current = Session()
            sessions = [current, *sessions]
            self.save_sessions(sessions)
            self.save_current_session_id(current.id)

        return sessions, current
