"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolchat.api.chat import router as chat_router
from toolchat.api.streams import SessionGuard, StreamRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    On shutdown, stops accepting new exchanges, closes every open chat
    stream and releases the orchestrator's HTTP clients. Under uvicorn the
    exit signal closes the streams first (see toolchat.main).

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting toolchat API...")
    yield
    # Shutdown
    logger.info("Shutting down toolchat API...")
    app.state.streams.close_all()
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        await orchestrator.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="toolchat API",
        description=(
            "Streaming chat assistant. Proxies conversations to a language model, "
            "runs web search, weather and page fetch tools on the model's behalf, "
            "and streams the exchange back as Server-Sent Events."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.streams = StreamRegistry()
    application.state.session_guard = SessionGuard()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "toolchat"}

    return application


app = create_app()
