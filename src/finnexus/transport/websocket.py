"""WebSocket transport channel.

Uses the asyncio client of the websockets library. One background task
owns the connection: it performs the handshake, reads inbound messages
in order and runs a writer that drains the outbound queue.
"""

import asyncio
import contextlib
import logging

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..errors import ChannelError, NotConnectedError
from .base import ChannelListener, ChannelState, TransportChannel

logger = logging.getLogger(__name__)

# Seconds allowed for the opening handshake
DEFAULT_OPEN_TIMEOUT = 10.0


class WebSocketChannel(TransportChannel):
    """TransportChannel over a WebSocket connection.

    Hidden design decisions:
    - websockets client configuration and handshake timeout
    - Outbound queue and writer task
    - Mapping of library exceptions onto a single close event
    """

    def __init__(
        self,
        url: str,
        listener: ChannelListener,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT
    ) -> None:
        super().__init__(url, listener)
        self._open_timeout = open_timeout
        self._state = ChannelState.NEW
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ChannelState:
        return self._state

    def open(self) -> None:
        """Schedule the connection on the running event loop.

        Raises:
            RuntimeError: If called outside a running event loop
            ChannelError: If the channel was already opened
        """
        if self._state != ChannelState.NEW:
            raise ChannelError(f"Channel already used (state: {self._state.value})")

        loop = asyncio.get_running_loop()
        self._state = ChannelState.CONNECTING
        self._task = loop.create_task(self._run())

    def send(self, text: str) -> None:
        if self._state != ChannelState.OPEN:
            raise NotConnectedError(f"Channel is not open (state: {self._state.value})")
        self._outbox.put_nowait(text)

    def close(self) -> None:
        if self._state == ChannelState.CLOSED:
            return

        started = self._state != ChannelState.NEW
        self._state = ChannelState.CLOSED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if started:
            self._notify_close()

    async def wait_closed(self) -> None:
        """Wait until the background connection task has finished."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        try:
            async with connect(self._url, open_timeout=self._open_timeout) as connection:
                self._state = ChannelState.OPEN
                logger.info("Channel open: %s", self._redacted_url())
                self._dispatch(self._listener.on_open)

                writer = asyncio.create_task(self._drain(connection))
                try:
                    async for message in connection:
                        self._dispatch(self._listener.on_message, message)
                finally:
                    writer.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await writer
        except ConnectionClosed as e:
            logger.info("Channel closed by remote: %s", e)
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.error("Channel to %s failed: %s", self._redacted_url(), e)
        finally:
            if self._state != ChannelState.CLOSED:
                self._state = ChannelState.CLOSED
                self._notify_close()

    async def _drain(self, connection: ClientConnection) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await connection.send(text)
            except ConnectionClosed:
                logger.warning("Dropping outbound message, connection closed")
                return

    def _notify_close(self) -> None:
        logger.info("Channel closed: %s", self._redacted_url())
        self._dispatch(self._listener.on_close)

    def _dispatch(self, handler, *args) -> None:
        # A failing listener must not take the reader down with it
        try:
            handler(*args)
        except Exception:
            logger.exception("Channel listener %s failed", getattr(handler, "__name__", handler))

    def _redacted_url(self) -> str:
        # The query string carries the bearer credential
        return self._url.split("?", 1)[0]
