"""Transport channel module for finnexus.

Provides the single bidirectional connection to the agent endpoint.
"""

from .base import ChannelListener, ChannelState, TransportChannel
from .factory import create_channel
from .url import build_channel_url, websocket_scheme
from .websocket import WebSocketChannel

__all__ = [
    "ChannelListener",
    "ChannelState",
    "TransportChannel",
    "WebSocketChannel",
    "build_channel_url",
    "create_channel",
    "websocket_scheme",
]
