"""Session manager for conversations with a remote agent.

Owns the current session, the lifecycle of its transport channel and
all client-visible conversation state. State is mutated only from the
manager's own operations and channel event handlers.

Hidden design decisions:
- At most one live channel; replacing it ignores late events from the old one
- Generation counter discarding superseded history fetches
- Pending-send queue flushed when the channel becomes ready
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Coroutine
from datetime import datetime
from typing import Any
from uuid import uuid4

from ..config import ClientConfig
from ..conversation import Message, ResponseAssembler, Role, Session
from ..errors import HistoryError, NotConnectedError
from ..history import HistoryClient
from ..protocol import DoneFrame, ErrorFrame, Frame, StepFrame, TokenFrame, decode_frame
from ..transport import ChannelListener, TransportChannel, build_channel_url, create_channel
from .callbacks import SessionCallback
from .status import Status, StatusEvent, StatusMachine, event_for_frame

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[str, ChannelListener], TransportChannel]
CancelHandler = Callable[[str], Awaitable[Any]]


class _ChannelBinding:
    """Listener tying one channel to the generation that opened it."""

    def __init__(self, manager: "SessionManager", generation: int, channel_id: int) -> None:
        self._manager = manager
        self.generation = generation
        self.channel_id = channel_id

    def on_open(self) -> None:
        self._manager._handle_open(self)

    def on_message(self, payload: str) -> None:
        self._manager._handle_message(self, payload)

    def on_close(self) -> None:
        self._manager._handle_close(self)


class SessionManager:
    """Conversation state and channel lifecycle for one client.

    Usage:
        async with SessionManager(history, config=config) as manager:
            await manager.fetch_sessions(token)
            manager.start_new_session(token)
            manager.send_message("Hi")
    """

    def __init__(
        self,
        history: HistoryClient,
        config: ClientConfig | None = None,
        callback: SessionCallback | None = None,
        channel_factory: ChannelFactory | None = None,
        cancel_handler: CancelHandler | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            history: Client for the remote history service
            config: Connection configuration (defaults to ClientConfig())
            callback: Observer notified of state changes
            channel_factory: Builds a channel for a URL and listener
                (defaults to the configured transport)
            cancel_handler: Out-of-band request asking the agent to stop
                generating for a session id
        """
        self._history = history
        self._config = config or ClientConfig()
        self._callback = callback or SessionCallback()
        self._channel_factory = channel_factory or self._default_channel_factory
        self._cancel_handler = cancel_handler

        self._messages: list[Message] = []
        self._notices: list[Message] = []
        self._thinking_steps: list[str] = []
        self._sessions: list[Session] = []
        self._current_session_id: str | None = None
        self._credential: str | None = None

        self._status = StatusMachine()
        self._assembler = ResponseAssembler()

        self._channel: TransportChannel | None = None
        self._channel_id = 0
        self._generation = 0
        self._loading: int | None = None
        self._pending: deque[str] = deque()
        self._background: set[asyncio.Task[Any]] = set()

    # Read-only views

    @property
    def status(self) -> Status:
        return self._status.status

    @property
    def messages(self) -> list[Message]:
        """Copy of the conversation messages, oldest first."""
        return [m.model_copy() for m in self._messages]

    @property
    def thinking_steps(self) -> list[str]:
        return list(self._thinking_steps)

    @property
    def sessions(self) -> list[Session]:
        """Cached session summaries from the last successful fetch."""
        return [s.model_copy() for s in self._sessions]

    @property
    def current_session_id(self) -> str | None:
        return self._current_session_id

    @property
    def pending_sends(self) -> tuple[str, ...]:
        """Texts waiting for the channel to become ready."""
        return tuple(self._pending)

    @property
    def is_ready(self) -> bool:
        """Whether send_message would transmit immediately."""
        return self._channel is not None and self._channel.is_ready

    # Operations

    async def fetch_sessions(self, credential: str) -> list[Session]:
        """Refresh the cached session list.

        On failure the error is logged and the cached list is kept.

        Args:
            credential: Bearer credential

        Returns:
            The cached session list after the refresh attempt
        """
        try:
            sessions = await self._history.list_sessions(credential)
        except HistoryError as e:
            logger.error("Failed to fetch sessions: %s", e)
            self._callback.on_error(e)
            return self.sessions

        self._sessions = list(sessions)
        self._callback.on_sessions(self.sessions)
        return self.sessions

    async def load_session(self, credential: str, session_id: str) -> None:
        """Switch to a persisted session and resume it.

        Closes the current channel, resets state, loads the session's
        history and opens a new channel. A history failure leaves the
        message list empty but the channel is still opened. If another
        load or new session starts while history is being fetched, this
        call returns without touching state. Text passed to send_or_start
        during the fetch is kept after the loaded history and sent once
        the channel opens.

        Args:
            credential: Bearer credential
            session_id: Session to resume
        """
        generation = self._begin_session(credential, session_id)
        self._loading = generation

        try:
            history = await self._history.get_messages(credential, session_id)
        except HistoryError as e:
            logger.error("Failed to load history for session %s: %s", session_id, e)
            self._callback.on_error(e)
            history = []

        if generation != self._generation:
            logger.debug("Discarding superseded history for session %s", session_id)
            return

        self._loading = None
        # Messages sent while history was loading follow it
        self._messages = list(history) + self._messages
        self._callback.on_messages_reset(self.messages)
        self._open_channel(credential, session_id, generation)

    def start_new_session(self, credential: str) -> str:
        """Start a fresh session with a client-generated id.

        The server creates its record once the first message is persisted.

        Args:
            credential: Bearer credential

        Returns:
            The new session id
        """
        session_id = str(uuid4())
        generation = self._begin_session(credential, session_id)
        self._open_channel(credential, session_id, generation)
        return session_id

    def send_message(self, text: str) -> None:
        """Send user text to the agent.

        Records the user message, clears the thinking steps and resets
        the response buffer. If the channel is still connecting, the
        text is queued and sent as soon as it opens.

        Args:
            text: Message sent verbatim

        Raises:
            NotConnectedError: If there is no channel or it has closed
        """
        channel = self._channel
        if channel is None or channel.is_closed:
            raise NotConnectedError("No open channel; start or load a session first")

        self._record_user_message(text)
        if channel.is_ready:
            channel.send(text)
        else:
            logger.info("Channel not ready yet, queueing message for session %s", self._current_session_id)
            self._pending.append(text)

    def send_or_start(self, credential: str, text: str) -> str:
        """Send text, starting or reopening a session first if needed.

        Args:
            credential: Bearer credential
            text: Message sent verbatim

        Returns:
            The session id the text was sent on
        """
        if self._current_session_id is None:
            self.start_new_session(credential)
        elif self._loading == self._generation:
            # The channel opens once history arrives and flushes the queue
            self._record_user_message(text)
            self._pending.append(text)
            return self._current_session_id
        elif self._channel is None or self._channel.is_closed:
            self.reconnect(credential)

        self.send_message(text)
        return self._current_session_id

    def reconnect(self, credential: str | None = None) -> None:
        """Reopen the channel for the current session.

        Messages are kept. Never called automatically.

        Args:
            credential: Bearer credential (defaults to the last one used)

        Raises:
            NotConnectedError: If there is no current session or credential
        """
        credential = credential or self._credential
        if self._current_session_id is None or credential is None:
            raise NotConnectedError("No session to reconnect")
        if self._loading == self._generation:
            logger.info("Session %s is still loading; its channel opens when history arrives", self._current_session_id)
            return

        self._generation += 1
        self._close_channel()
        self._set_status(StatusEvent.CHANNEL_CLOSE)
        self._credential = credential
        self._open_channel(credential, self._current_session_id, self._generation)

    async def cancel(self) -> None:
        """Stop the in-flight response.

        Asks the agent to stop through the cancel handler, if any, then
        closes the channel.
        """
        session_id = self._current_session_id
        if self._cancel_handler is not None and session_id is not None:
            try:
                await self._cancel_handler(session_id)
            except Exception as e:
                logger.error("Cancel request for session %s failed: %s", session_id, e)
                self._callback.on_error(e)
        self.disconnect()

    def disconnect(self) -> None:
        """Close the current channel, moving the status to idle."""
        self._close_channel()
        self._set_status(StatusEvent.CHANNEL_CLOSE)

    async def close(self) -> None:
        """Disconnect and wait for background refreshes to finish."""
        self.disconnect()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Internals

    def _record_user_message(self, text: str) -> None:
        self._flush_notices()
        message = Message(role=Role.USER, content=text, created_at=datetime.now())
        self._messages.append(message)
        self._thinking_steps = []
        self._assembler.reset()
        self._callback.on_message(message.model_copy())

    def _default_channel_factory(self, url: str, listener: ChannelListener) -> TransportChannel:
        return create_channel(self._config.transport, url, listener)

    def _begin_session(self, credential: str, session_id: str) -> int:
        # Bump first so events from the closing channel are recognized as stale
        self._generation += 1
        self._close_channel()

        self._current_session_id = session_id
        self._credential = credential
        self._loading = None
        self._messages = []
        self._notices = []
        self._thinking_steps = []
        self._assembler.reset()

        self._callback.on_session_changed(session_id)
        if self._status.reset():
            self._callback.on_status_change(self._status.status)
        self._callback.on_messages_reset([])
        return self._generation

    def _open_channel(self, credential: str, session_id: str, generation: int) -> None:
        url = build_channel_url(self._config.base_url, credential, session_id, self._config.ws_path)
        self._channel_id += 1
        binding = _ChannelBinding(self, generation, self._channel_id)
        channel = self._channel_factory(url, binding)
        self._channel = channel
        logger.info("Opening channel for session %s", session_id)
        channel.open()

    def _close_channel(self) -> None:
        channel, self._channel = self._channel, None
        if channel is not None:
            channel.close()
        self._drop_pending("channel closed")

    def _is_current(self, binding: _ChannelBinding) -> bool:
        return binding.generation == self._generation and binding.channel_id == self._channel_id

    def _set_status(self, event: StatusEvent) -> None:
        if self._status.apply(event):
            self._callback.on_status_change(self._status.status)

    def _drop_pending(self, reason: str) -> None:
        if not self._pending:
            return
        count = len(self._pending)
        self._pending.clear()
        logger.error("Dropped %d unsent message(s): %s", count, reason)
        self._callback.on_error(NotConnectedError(f"{count} message(s) not sent: {reason}"))

    def _handle_open(self, binding: _ChannelBinding) -> None:
        if not self._is_current(binding) or self._channel is None:
            return

        self._set_status(StatusEvent.CHANNEL_OPEN)
        while self._pending:
            self._channel.send(self._pending.popleft())

    def _handle_close(self, binding: _ChannelBinding) -> None:
        if not self._is_current(binding):
            return

        self._channel = None
        self._flush_notices()
        self._set_status(StatusEvent.CHANNEL_CLOSE)
        self._drop_pending("channel closed before it was ready")

    def _handle_message(self, binding: _ChannelBinding, payload: str) -> None:
        if not self._is_current(binding):
            return

        frame = decode_frame(payload)
        if frame is not None:
            self._apply_frame(frame)

    def _apply_frame(self, frame: Frame) -> None:
        if isinstance(frame, StepFrame):
            self._thinking_steps.append(frame.content)
            self._callback.on_thinking_step(frame.content)

        elif isinstance(frame, TokenFrame):
            message = self._assembler.add_token(self._messages, frame.content)
            if self._notices:
                self._messages[-1:-1] = self._notices
                self._notices = []
            self._callback.on_token(frame.content)
            self._callback.on_message(message.model_copy())

        elif isinstance(frame, ErrorFrame):
            logger.error("Agent error in session %s: %s", self._current_session_id, frame.content)
            if self._config.surface_agent_errors:
                self._surface_error(frame.content)
            self._callback.on_agent_error(frame.content)

        elif isinstance(frame, DoneFrame):
            self._flush_notices()
            self._callback.on_done()
            if self._credential is not None:
                self._spawn(self.fetch_sessions(self._credential))

        event = event_for_frame(frame)
        if event is not None:
            self._set_status(event)

    def _surface_error(self, content: str) -> None:
        message = Message(role=Role.SYSTEM, content=content, created_at=datetime.now())
        last = self._messages[-1] if self._messages else None
        if self._assembler.text and last is not None and last.role == Role.ASSISTANT:
            # Keep the streaming answer last so later tokens still extend it
            self._messages.insert(len(self._messages) - 1, message)
        else:
            self._notices.append(message)
        self._callback.on_message(message.model_copy())

    def _flush_notices(self) -> None:
        if self._notices:
            self._messages.extend(self._notices)
            self._notices = []

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
