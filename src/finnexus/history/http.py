"""REST history client.

Talks to the agent server's session endpoints with httpx.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import HTTP_TIMEOUT_SECONDS, SESSIONS_PATH
from ..conversation import Message, Session
from ..errors import HistoryError
from .base import HistoryClient

logger = logging.getLogger(__name__)


class HttpHistoryClient(HistoryClient):
    """HistoryClient backed by the server's REST API.

    Hidden design decisions:
    - httpx client setup and timeouts
    - Bearer authentication header
    - Tolerant parsing of list payloads (null bodies, bad records)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        sessions_path: str = SESSIONS_PATH,
        **client_kwargs: Any
    ):
        """Initialize the client.

        Args:
            base_url: Server base URL, e.g. "http://localhost:8080"
            timeout: Request timeout in seconds
            sessions_path: Path of the sessions collection
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._sessions_path = sessions_path.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            **client_kwargs
        )

    async def list_sessions(self, credential: str) -> list[Session]:
        data = await self._get_json(self._sessions_path, credential)
        sessions = []
        for record in self._as_list(data, "sessions"):
            try:
                sessions.append(Session.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping invalid session record: %s", e.errors(include_url=False))
        return sessions

    async def get_messages(self, credential: str, session_id: str) -> list[Message]:
        data = await self._get_json(f"{self._sessions_path}/{session_id}", credential)
        messages = []
        for record in self._as_list(data, "messages"):
            if not isinstance(record, dict):
                logger.warning("Skipping message record that is not an object: %r", record)
                continue
            try:
                messages.append(Message.from_history(record))
            except ValidationError as e:
                logger.warning("Skipping invalid message record: %s", e.errors(include_url=False))
        return messages

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def backend_type(self) -> str:
        return "http"

    async def _get_json(self, path: str, credential: str) -> Any:
        try:
            response = await self._client.get(
                path,
                headers={"Authorization": f"Bearer {credential}"}
            )
        except httpx.HTTPError as e:
            raise HistoryError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            raise HistoryError(
                f"Request to {path} returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise HistoryError(f"Response from {path} is not valid JSON") from e

    @staticmethod
    def _as_list(data: Any, what: str) -> list[Any]:
        # The server answers null for an empty collection
        if data is None:
            return []
        if not isinstance(data, list):
            raise HistoryError(f"Expected a list of {what}, got {type(data).__name__}")
        return data
