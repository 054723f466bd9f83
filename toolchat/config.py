"""Server and UI configuration with environment variable loading.

Shared by the entry point and the chat page so both agree on where the
API listens.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()

# Wildcard bind addresses are not connectable; the UI dials loopback instead
_WILDCARD_HOSTS = ("", "0.0.0.0", "::")


class ServerConfig(BaseModel):
    """Configuration for the HTTP servers.

    Attributes:
        host: Bind address of the API server.
        port: Port of the API server (and of the UI in integrated mode).
        ui_port: Port of the NiceGUI server in separate mode.
        log_level: Logging level name.
        run_mode: ``integrated`` serves API and UI together, ``separate``
            runs them as two servers.
        api_base_url: Explicit API URL for the UI; derived from host and
            port when unset.
        storage_secret: Secret signing NiceGUI's per-user storage.
    """

    model_config = ConfigDict(validate_default=True)

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: os.getenv("PORT", "8000"), ge=1, le=65535)
    ui_port: int = Field(default_factory=lambda: os.getenv("UI_PORT", "8080"), ge=1, le=65535)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    run_mode: Literal["integrated", "separate"] = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated").lower()
    )
    api_base_url: str | None = Field(default_factory=lambda: os.getenv("API_BASE_URL") or None)
    storage_secret: str = Field(
        default_factory=lambda: os.getenv("NICEGUI_STORAGE_SECRET", "toolchat-secret")
    )

    def resolved_api_base_url(self) -> str:
        """URL the chat page posts exchanges to."""
        if self.api_base_url:
            return self.api_base_url.rstrip("/")
        host = "127.0.0.1" if self.host in _WILDCARD_HOSTS else self.host
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.port}"


def get_server_config() -> ServerConfig:
    """Create server configuration from environment.

    Raises:
        pydantic.ValidationError: If a variable is malformed.
    """
    return ServerConfig()
