"""In-memory history client.

Simple dict-based storage standing in for the remote service.
Data is lost when the application exits.
"""

from datetime import datetime

from ..conversation import Message, Role, Session
from ..errors import HistoryError
from .base import HistoryClient


class InMemoryHistoryClient(HistoryClient):
    """History held in memory.

    Suitable for offline use and testing. Sessions are visible to every
    credential unless `valid_credentials` is given.
    """

    def __init__(self, valid_credentials: set[str] | None = None):
        self._valid_credentials = valid_credentials
        self._sessions: dict[str, Session] = {}
        self._messages: dict[str, list[Message]] = {}
        self._activity: dict[str, int] = {}
        self._clock = 0

    def add_session(self, session_id: str, title: str = "") -> Session:
        """Create or replace a session record."""
        now = datetime.now()
        session = Session(id=session_id, title=title, created_at=now, updated_at=now)
        self._sessions[session_id] = session
        self._messages.setdefault(session_id, [])
        self._touch(session_id)
        return session

    def add_message(self, session_id: str, role: Role | str, content: str) -> Message:
        """Append a message, creating the session on first use."""
        if session_id not in self._sessions:
            self.add_session(session_id, title=content[:50])
        message = Message.from_history({"role": role, "content": content, "created_at": datetime.now()})
        self._messages[session_id].append(message)
        self._sessions[session_id].updated_at = datetime.now()
        self._touch(session_id)
        return message

    async def list_sessions(self, credential: str) -> list[Session]:
        self._check(credential)
        return sorted(
            (s.model_copy() for s in self._sessions.values()),
            key=lambda s: self._activity[s.id],
            reverse=True
        )

    async def get_messages(self, credential: str, session_id: str) -> list[Message]:
        self._check(credential)
        if session_id not in self._sessions:
            raise HistoryError(f"Session not found: {session_id}", status_code=404)
        return [m.model_copy() for m in self._messages[session_id]]

    async def close(self) -> None:
        """Close client (no-op for in-memory)."""
        pass

    @property
    def backend_type(self) -> str:
        return "memory"

    def _touch(self, session_id: str) -> None:
        # Ordering counter; timestamps can tie
        self._clock += 1
        self._activity[session_id] = self._clock

    def _check(self, credential: str) -> None:
        if self._valid_credentials is not None and credential not in self._valid_credentials:
            raise HistoryError("Invalid credential", status_code=401)
