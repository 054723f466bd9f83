"""Exceptions raised while running a chat exchange from the client side."""


class ChatClientError(Exception):
    """Base class for failures of one chat exchange."""


class RequestFailed(ChatClientError):
    """The chat endpoint answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Chat request failed: {status_code}")


class NoBody(ChatClientError):
    """The chat endpoint answered without a response body."""

    def __init__(self) -> None:
        super().__init__("No response body")


class ProtocolError(ChatClientError):
    """The event stream violated the wire protocol."""


class StreamError(ChatClientError):
    """The server ended the exchange with a failure event."""
