"""Factory for creating transport channels."""

from typing import Any

from ..config import TRANSPORT_WEBSOCKET
from .base import ChannelListener, TransportChannel


def create_channel(
    transport: str,
    url: str,
    listener: ChannelListener,
    **kwargs: Any
) -> TransportChannel:
    """Create a transport channel.

    Args:
        transport: Transport type ("websocket")
        url: Endpoint URL including query parameters
        listener: Receiver of channel events
        **kwargs: Transport-specific configuration

    Returns:
        An unopened TransportChannel

    Raises:
        ValueError: If transport type is not supported
    """
    if transport == TRANSPORT_WEBSOCKET:
        from .websocket import WebSocketChannel
        return WebSocketChannel(url, listener, **kwargs)

    raise ValueError(
        f"Unsupported transport: {transport}. "
        f"Supported transports: {TRANSPORT_WEBSOCKET}"
    )
