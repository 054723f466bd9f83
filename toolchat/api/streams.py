"""Lifecycle bookkeeping for open chat streams.

StreamRegistry tracks every open SSE stream so the shutdown sequence can
close them all. SessionGuard keeps a conversation to one in-flight
exchange. Both are owned by the application and live on ``app.state``.
"""

import asyncio
import itertools
import logging

logger = logging.getLogger(__name__)


class StreamHandle:
    """Registration of one open SSE stream.

    ``close()`` may be called while the stream is blocked inside a model or
    tool call; the stream waits on ``wait_closed()`` alongside its next event.
    """

    def __init__(self, stream_id: int, session_id: str | None = None) -> None:
        self.stream_id = stream_id
        self.session_id = session_id
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class StreamRegistry:
    """Register-on-open, deregister-on-close table of active streams."""

    def __init__(self) -> None:
        self._handles: dict[int, StreamHandle] = {}
        self._ids = itertools.count(1)
        self.accepting = True

    def __len__(self) -> int:
        return len(self._handles)

    def register(self, session_id: str | None = None) -> StreamHandle:
        """Register a new stream.

        Raises:
            RuntimeError: If the registry was closed for shutdown.
        """
        if not self.accepting:
            raise RuntimeError("Server is shutting down")
        handle = StreamHandle(next(self._ids), session_id)
        self._handles[handle.stream_id] = handle
        return handle

    def deregister(self, handle: StreamHandle) -> None:
        self._handles.pop(handle.stream_id, None)

    def close_all(self) -> int:
        """Stop accepting streams and close every open one.

        Returns:
            Number of streams that were open.
        """
        self.accepting = False
        handles = list(self._handles.values())
        for handle in handles:
            handle.close()
        self._handles.clear()
        if handles:
            logger.info(f"Closed {len(handles)} active chat streams")
        return len(handles)


class SessionGuard:
    """At most one in-flight exchange per conversation id."""

    def __init__(self) -> None:
        self._active: set[str] = set()

    def is_active(self, session_id: str) -> bool:
        return session_id in self._active

    def acquire(self, session_id: str) -> bool:
        """Claim the session; False if an exchange is already running."""
        if session_id in self._active:
            return False
        self._active.add(session_id)
        return True

    def release(self, session_id: str) -> None:
        self._active.discard(session_id)
