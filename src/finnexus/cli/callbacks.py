"""Console rendering of session updates.

Prints thinking steps and streamed tokens as they arrive and lets the
chat loop wait for the end of a turn.
"""

import asyncio

from rich.console import Console
from rich.markup import escape

from ..session import SessionCallback, Status

# Characters buffered before flushing streamed tokens to the console
STREAM_BUFFER_THRESHOLD = 50


class ConsoleCallback(SessionCallback):
    """SessionCallback writing to a Rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.turn_finished = asyncio.Event()
        self.turn_finished.set()
        self._stream_buffer: list[str] = []
        self._stream_chars = 0
        self._streaming = False
        self._status = Status.IDLE
        self._switching = False

    def begin_turn(self) -> None:
        """Mark a user turn as in progress."""
        self.turn_finished.clear()

    def on_session_changed(self, session_id: str) -> None:
        # The manager goes idle right after a switch from a live session
        self._switching = self._status != Status.IDLE

    def on_status_change(self, status: Status) -> None:
        self._status = status
        if status == Status.STREAMING and not self._streaming:
            self._streaming = True
            self.console.print("[bold magenta]Assistant:[/] ", end="")
        elif status == Status.IDLE:
            self._end_stream()
            if self._switching:
                self._switching = False
            else:
                self.console.print("[dim]Disconnected.[/dim]")
            self.turn_finished.set()

    def on_thinking_step(self, step: str) -> None:
        self._end_stream()
        self.console.print(f"[cyan]  thinking:[/] [dim]{escape(step)}[/dim]")

    def on_token(self, content: str) -> None:
        self._stream_buffer.append(content)
        self._stream_chars += len(content)
        if self._stream_chars >= STREAM_BUFFER_THRESHOLD:
            self._flush()

    def on_done(self) -> None:
        self._end_stream()
        self.turn_finished.set()

    def on_agent_error(self, content: str) -> None:
        self._end_stream()
        self.console.print(f"[bold red]Agent error:[/] {escape(content)}")

    def on_error(self, error: Exception) -> None:
        self.console.print(f"[yellow]Warning: {escape(str(error))}[/yellow]")
        self.turn_finished.set()

    def _flush(self) -> None:
        if self._stream_buffer:
            self.console.print("".join(self._stream_buffer), end="", markup=False, highlight=False)
            self._stream_buffer = []
            self._stream_chars = 0

    def _end_stream(self) -> None:
        if self._streaming:
            self._flush()
            self.console.print()
            self._streaming = False
