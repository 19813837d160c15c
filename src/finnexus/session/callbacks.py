"""Observer interface for session manager updates.

Hides how a consuming interface learns about state changes. Subclass
SessionCallback and override the hooks you need; every hook defaults
to doing nothing.
"""

from ..conversation import Message, Session
from .status import Status


class SessionCallback:
    """Receiver of SessionManager state changes.

    Hooks run synchronously on the event loop inside the manager's
    handlers and should return quickly.
    """

    def on_status_change(self, status: Status) -> None:
        """Called whenever the status changes."""

    def on_session_changed(self, session_id: str) -> None:
        """Called when a session is loaded or started."""

    def on_messages_reset(self, messages: list[Message]) -> None:
        """Called when the message list is replaced wholesale."""

    def on_message(self, message: Message) -> None:
        """Called when a message is appended or its content grows."""

    def on_token(self, content: str) -> None:
        """Called for every token fragment, before on_message."""

    def on_thinking_step(self, step: str) -> None:
        """Called when a trace step arrives."""

    def on_done(self) -> None:
        """Called when the agent finishes a turn."""

    def on_agent_error(self, content: str) -> None:
        """Called when the agent reports an error frame."""

    def on_sessions(self, sessions: list[Session]) -> None:
        """Called when the cached session list is refreshed."""

    def on_error(self, error: Exception) -> None:
        """Called for local failures: fetch errors, dropped sends."""
