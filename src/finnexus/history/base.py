"""Abstract base class for history clients.

This module defines the interface to the remote service that persists
conversations. The abstraction hides:
- Endpoint layout and authentication headers
- Response parsing and role coercion
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any

from ..conversation import Message, Session


class HistoryClient(ABC):
    """Read-only access to persisted sessions and their messages.

    Supports async context manager protocol for resource cleanup:
        async with client:
            sessions = await client.list_sessions(token)
    """

    @abstractmethod
    async def list_sessions(self, credential: str) -> list[Session]:
        """Retrieve the session summaries owned by the credential.

        Raises:
            HistoryError: If the service cannot be reached or rejects the request
        """

    @abstractmethod
    async def get_messages(self, credential: str, session_id: str) -> list[Message]:
        """Retrieve the persisted messages of one session, oldest first.

        Raises:
            HistoryError: If the service cannot be reached or rejects the request
        """

    @abstractmethod
    async def close(self) -> None:
        """Release any open connections."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "HistoryClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
