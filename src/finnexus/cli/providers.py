"""Provider factory functions for CLI.

Centralizes creation of configuration, credentials and clients from
environment variables. Hides configuration details from command
implementations.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from ..config import ClientConfig
from ..history import HistoryClient, create_history_client

# Default console for output
_console = Console()


def setup_logging(level: str | None = None, console: Console | None = None) -> None:
    """Route package logging through Rich.

    Args:
        level: Log level name (default: FINNEXUS_LOG_LEVEL or WARNING)
        console: Optional Rich console to log to
    """
    level_name = (level or os.getenv("FINNEXUS_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or _console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def get_config() -> ClientConfig:
    """Create client configuration from environment variables.

    Environment variables:
        FINNEXUS_BASE_URL: Server base URL (default: http://localhost:8080)
        FINNEXUS_WS_PATH: Chat WebSocket path (default: /api/v1/ws/chat)
        FINNEXUS_HTTP_TIMEOUT: History request timeout in seconds (default: 10)
        FINNEXUS_SURFACE_ERRORS: Show agent errors as system messages (default: false)
    """
    return ClientConfig.from_env()


def get_history(config: ClientConfig) -> HistoryClient:
    """Create the REST history client for the configured server."""
    return create_history_client(
        "http",
        base_url=config.base_url,
        timeout=config.http_timeout
    )


def require_credential(token: str | None = None, console: Console | None = None) -> str:
    """Get the bearer credential, exiting if none is configured.

    Args:
        token: Credential given on the command line, if any
        console: Optional Rich console for output

    Returns:
        The credential

    Raises:
        SystemExit: If neither --token nor FINNEXUS_TOKEN is set

    Environment variables:
        FINNEXUS_TOKEN: Bearer credential issued by the server
    """
    import typer

    con = console or _console
    credential = token or os.getenv("FINNEXUS_TOKEN")
    if not credential:
        con.print("[red]Error: FINNEXUS_TOKEN not set and no --token given[/red]")
        raise typer.Exit(code=1)
    return credential
