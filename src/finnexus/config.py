"""Client configuration.

Centralizes endpoint paths, timeouts and the environment-driven
ClientConfig used by the CLI and the session manager.
"""

import os

from pydantic import BaseModel, Field, field_validator

# Endpoint paths on the agent server
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_WS_PATH = "/api/v1/ws/chat"
SESSIONS_PATH = "/api/v1/sessions"

# Query parameter names carried by the channel URL
TOKEN_QUERY_PARAM = "token"
SESSION_QUERY_PARAM = "session_id"

# HTTP configuration
HTTP_TIMEOUT_SECONDS = 10.0

# Transport kinds understood by create_channel
TRANSPORT_WEBSOCKET = "websocket"

_TRUTHY = {"1", "true", "yes", "on"}


class ClientConfig(BaseModel):
    """Configuration for connecting to the agent server."""

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the hosting server (http or https)"
    )
    ws_path: str = Field(
        default=DEFAULT_WS_PATH,
        description="Path of the chat WebSocket endpoint"
    )
    transport: str = Field(
        default=TRANSPORT_WEBSOCKET,
        description="Transport channel implementation"
    )
    http_timeout: float = Field(
        default=HTTP_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout in seconds for history requests"
    )
    surface_agent_errors: bool = Field(
        default=False,
        description="Append agent error frames to the message list as system messages"
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("ws_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build configuration from environment variables.

        Environment variables:
            FINNEXUS_BASE_URL: Server base URL (default: http://localhost:8080)
            FINNEXUS_WS_PATH: Chat WebSocket path (default: /api/v1/ws/chat)
            FINNEXUS_HTTP_TIMEOUT: History request timeout in seconds (default: 10)
            FINNEXUS_SURFACE_ERRORS: Show agent errors as system messages (default: false)
        """
        return cls(
            base_url=os.getenv("FINNEXUS_BASE_URL", DEFAULT_BASE_URL),
            ws_path=os.getenv("FINNEXUS_WS_PATH", DEFAULT_WS_PATH),
            http_timeout=float(os.getenv("FINNEXUS_HTTP_TIMEOUT", str(HTTP_TIMEOUT_SECONDS))),
            surface_agent_errors=os.getenv("FINNEXUS_SURFACE_ERRORS", "").lower() in _TRUTHY,
        )
