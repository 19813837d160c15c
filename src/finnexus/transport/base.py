"""Abstract base class for transport channels.

This module defines the interface for the connection to the agent.
The abstraction hides:
- The wire library and its connection handshake
- Outbound buffering
- How inbound messages are read and delivered
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Protocol


class ChannelState(str, Enum):
    """Lifecycle state of a channel."""

    NEW = "new"                # Constructed, open() not yet called
    CONNECTING = "connecting"  # Handshake in progress
    OPEN = "open"              # Ready to send and receive
    CLOSED = "closed"          # Terminal, never reopened


class ChannelListener(Protocol):
    """Receiver of channel lifecycle and message events.

    Events are delivered on the event loop, in arrival order.
    """

    def on_open(self) -> None:
        """Called once when the channel becomes ready."""

    def on_message(self, payload: str) -> None:
        """Called for every inbound message."""

    def on_close(self) -> None:
        """Called once when an opened channel closes, for any reason."""


class TransportChannel(ABC):
    """A single bidirectional, message-oriented connection.

    A channel is used once: after it closes, a new channel must be
    created to reconnect. There is no implicit retry.
    """

    def __init__(self, url: str, listener: ChannelListener) -> None:
        self._url = url
        self._listener = listener

    @property
    def url(self) -> str:
        """URL the channel connects to."""
        return self._url

    @property
    @abstractmethod
    def state(self) -> ChannelState:
        """Current lifecycle state."""

    @property
    def is_ready(self) -> bool:
        """Whether send() will accept text."""
        return self.state == ChannelState.OPEN

    @property
    def is_closed(self) -> bool:
        return self.state == ChannelState.CLOSED

    @abstractmethod
    def open(self) -> None:
        """Start connecting.

        Returns immediately; readiness is reported through
        ChannelListener.on_open.
        """

    @abstractmethod
    def send(self, text: str) -> None:
        """Queue text for transmission.

        Args:
            text: Message to send verbatim

        Raises:
            NotConnectedError: If the channel is not open
        """

    @abstractmethod
    def close(self) -> None:
        """Close the channel.

        Idempotent: closing a closed or never-opened channel does nothing.
        """
