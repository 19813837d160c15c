"""
finnexus: A streaming chat client for remote AI agents.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .config import ClientConfig
from .conversation import Message, ResponseAssembler, Role, Session
from .errors import ChannelError, FinNexusError, HistoryError, NotConnectedError
from .history import HistoryClient, create_history_client
from .protocol import Frame, decode_frame
from .session import SessionCallback, SessionManager, Status
from .transport import TransportChannel, build_channel_url, create_channel

__all__ = [
    "ChannelError",
    "ClientConfig",
    "FinNexusError",
    "Frame",
    "HistoryClient",
    "HistoryError",
    "Message",
    "NotConnectedError",
    "ResponseAssembler",
    "Role",
    "Session",
    "SessionCallback",
    "SessionManager",
    "Status",
    "TransportChannel",
    "build_channel_url",
    "create_channel",
    "create_history_client",
    "decode_frame",
]
