"""Streaming chat endpoint.

Runs one exchange per request and streams its wire events as SSE frames.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from toolchat.agent.orchestrator import ChatOrchestrator, create_orchestrator
from toolchat.api.sse import SSE_HEADERS, SSE_MEDIA_TYPE, encode_event
from toolchat.api.streams import SessionGuard, StreamRegistry
from toolchat.models.events import WireEvent
from toolchat.models.schemas import ChatRequest, ModelMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def get_orchestrator(request: Request) -> ChatOrchestrator:
    """Return the application's orchestrator, creating it on first use.

    Raises:
        HTTPException: 503 if the model API is not configured.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        try:
            orchestrator = create_orchestrator()
        except ValueError as e:
            logger.error(f"Chat backend is not configured: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Chat backend is not configured",
            ) from e
        request.app.state.orchestrator = orchestrator
    return orchestrator


@router.post("/chat")
async def chat(
    request: Request,
    body: ChatRequest,
    orchestrator: Annotated[ChatOrchestrator, Depends(get_orchestrator)],
) -> StreamingResponse:
    """Stream one chat exchange as Server-Sent Events.

    Args:
        request: The incoming request, used to reach app-owned state.
        body: Conversation history, system prompt and optional session id.
        orchestrator: The orchestration loop.

    Returns:
        An SSE stream of text, tool_start, tool_end and a terminal
        done, error or max_rounds event.

    Raises:
        409: Another exchange is already running for this session.
        503: The server is shutting down.
    """
    registry: StreamRegistry = request.app.state.streams
    guard: SessionGuard = request.app.state.session_guard
    session_id = body.session_id

    if not registry.accepting:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Server is shutting down",
        )
    if session_id is not None and not guard.acquire(session_id):
        logger.warning(f"Rejected concurrent exchange for session {session_id}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An exchange is already in progress for this session",
        )

    handle = registry.register(session_id)
    history = [ModelMessage.from_message(message) for message in body.messages]
    logger.info(
        f"Chat stream {handle.stream_id} opened: session_id={session_id}, "
        f"messages={len(history)}"
    )

    async def event_stream() -> AsyncGenerator[bytes]:
        events = orchestrator.run(history, body.system)

        async def next_event() -> WireEvent | None:
            try:
                return await anext(events)
            except StopAsyncIteration:
                return None

        shutdown = asyncio.create_task(handle.wait_closed())
        pending: asyncio.Task[WireEvent | None] | None = None
        try:
            while True:
                # Next event or shutdown, whichever comes first
                pending = asyncio.create_task(next_event())
                await asyncio.wait({pending, shutdown}, return_when=asyncio.FIRST_COMPLETED)
                if not pending.done():
                    logger.info(f"Chat stream {handle.stream_id} closed by shutdown")
                    break
                event = pending.result()
                if event is None:
                    break
                yield encode_event(event)
        finally:
            shutdown.cancel()
            if pending is not None and not pending.done():
                pending.cancel()
                await asyncio.wait({pending})
            await events.aclose()
            registry.deregister(handle)
            if session_id is not None:
                guard.release(session_id)
            logger.info(f"Chat stream {handle.stream_id} finished")

    return StreamingResponse(
        event_stream(),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
