"""Main application entry point.

Integrated mode serves the API and the NiceGUI chat page from one uvicorn
server. Separate mode runs the API in a child process on PORT and the chat
page in the foreground on UI_PORT. Environment variables are loaded from
.env file.
"""

import asyncio
import logging
import multiprocessing
import sys
from types import FrameType

import uvicorn
from dotenv import load_dotenv

from toolchat.api.streams import StreamRegistry
from toolchat.config import ServerConfig, get_server_config

# Load environment variables before any other imports that might need them
load_dotenv()

logger = logging.getLogger(__name__)


class ChatServer(uvicorn.Server):
    """uvicorn server that closes open chat streams as soon as exit is signalled.

    uvicorn drains in-flight requests before lifespan shutdown runs, so SSE
    streams are told to end from the signal itself.
    """

    def __init__(self, config: uvicorn.Config, streams: StreamRegistry) -> None:
        super().__init__(config)
        self._streams = streams
        self._loop: asyncio.AbstractEventLoop | None = None

    async def serve(self, sockets=None) -> None:
        self._loop = asyncio.get_running_loop()
        await super().serve(sockets)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._streams.close_all)
        super().handle_exit(sig, frame)


def configure_logging(config: ServerConfig) -> None:
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def serve_api(app, config: ServerConfig) -> None:
    server = ChatServer(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        ),
        streams=app.state.streams,
    )
    server.run()


def run_integrated(config: ServerConfig) -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI handles /api/chat, NiceGUI serves the UI at / and /index.html.
    The page posts back to this server unless API_BASE_URL says otherwise.
    """
    from nicegui import ui

    from toolchat.api.app import create_app
    from toolchat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(app, title="toolchat", storage_secret=config.storage_secret)

    logger.info(f"Starting integrated server on {config.host}:{config.port}")
    logger.info(f"Chat UI posts to {config.resolved_api_base_url()}")
    serve_api(app, config)


def run_api(config: ServerConfig) -> None:
    from toolchat.api.app import create_app

    configure_logging(config)
    serve_api(create_app(), config)


def run_separate(config: ServerConfig) -> None:
    """Run the API in a child process and the chat page in this one.

    NiceGUI only starts from the main process, so the API is the child.
    """
    from toolchat.ui.chat_page import main as ui_main

    api_process = multiprocessing.Process(target=run_api, args=(config,), name="toolchat-api")
    api_process.start()
    logger.info(f"API on port {config.port}, chat UI on port {config.ui_port}")

    try:
        ui_main(port=config.ui_port, storage_secret=config.storage_secret)
    finally:
        logger.info("Stopping API server...")
        api_process.terminate()
        api_process.join()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the API and the chat page as two servers.
    """
    config = get_server_config()
    configure_logging(config)
    logger.info(f"Starting toolchat in {config.run_mode} mode")

    if config.run_mode == "separate":
        run_separate(config)
    else:
        run_integrated(config)


if __name__ == "__main__":
    main()
