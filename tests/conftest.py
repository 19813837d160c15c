"""Pytest configuration and shared fixtures."""
import json
import os

import pytest

from finnexus.config import ClientConfig
from finnexus.errors import NotConnectedError
from finnexus.history import InMemoryHistoryClient
from finnexus.session import SessionCallback, SessionManager
from finnexus.transport import ChannelListener, ChannelState, TransportChannel


class FakeChannel(TransportChannel):
    """In-process channel driven by the test.

    open() only moves to CONNECTING; the test decides when the channel
    becomes ready, what it receives and when it drops.
    """

    def __init__(self, url: str, listener: ChannelListener) -> None:
        super().__init__(url, listener)
        self._state = ChannelState.NEW
        self.sent: list[str] = []

    @property
    def state(self) -> ChannelState:
        return self._state

    def open(self) -> None:
        self._state = ChannelState.CONNECTING

    def send(self, text: str) -> None:
        if self._state != ChannelState.OPEN:
            raise NotConnectedError("fake channel not open")
        self.sent.append(text)

    def close(self) -> None:
        if self._state == ChannelState.CLOSED:
            return
        started = self._state != ChannelState.NEW
        self._state = ChannelState.CLOSED
        if started:
            self._listener.on_close()

    def accept(self) -> None:
        """Complete the handshake."""
        self._state = ChannelState.OPEN
        self._listener.on_open()

    def deliver(self, frame) -> None:
        """Deliver a frame (dicts are JSON-encoded, strings sent as-is)."""
        payload = frame if isinstance(frame, (str, bytes)) else json.dumps(frame)
        self._listener.on_message(payload)

    def drop(self) -> None:
        """Simulate the remote side closing the connection."""
        self._state = ChannelState.CLOSED
        self._listener.on_close()


class FakeChannelFactory:
    """Channel factory recording every channel it builds."""

    def __init__(self) -> None:
        self.channels: list[FakeChannel] = []

    def __call__(self, url: str, listener: ChannelListener) -> FakeChannel:
        channel = FakeChannel(url, listener)
        self.channels.append(channel)
        return channel

    @property
    def latest(self) -> FakeChannel:
        return self.channels[-1]


class RecordingCallback(SessionCallback):
    """SessionCallback remembering what it was told."""

    def __init__(self) -> None:
        self.statuses = []
        self.tokens = []
        self.steps = []
        self.agent_errors = []
        self.errors = []
        self.session_lists = []
        self.done_count = 0

    def on_status_change(self, status):
        self.statuses.append(status)

    def on_token(self, content):
        self.tokens.append(content)

    def on_thinking_step(self, step):
        self.steps.append(step)

    def on_agent_error(self, content):
        self.agent_errors.append(content)

    def on_error(self, error):
        self.errors.append(error)

    def on_sessions(self, sessions):
        self.session_lists.append(sessions)

    def on_done(self):
        self.done_count += 1


@pytest.fixture(scope="session")
def server_url():
    """Return the agent server URL for integration tests."""
    return os.getenv("FINNEXUS_BASE_URL", "http://localhost:8080")


@pytest.fixture
def config():
    """Return a client configuration pointing at a test host."""
    return ClientConfig(base_url="https://agent.example.com")


@pytest.fixture
def history():
    """Return an in-memory history with one persisted session."""
    client = InMemoryHistoryClient()
    client.add_session("s-1", title="Market outlook")
    client.add_message("s-1", "user", "How is the market?")
    client.add_message("s-1", "assistant", "Mostly flat today.")
    return client


@pytest.fixture
def channels():
    """Return a recording fake channel factory."""
    return FakeChannelFactory()


@pytest.fixture
def callback():
    """Return a recording session callback."""
    return RecordingCallback()


@pytest.fixture
def manager(history, config, channels, callback):
    """Return a session manager wired to fakes."""
    return SessionManager(
        history,
        config=config,
        callback=callback,
        channel_factory=channels,
    )
