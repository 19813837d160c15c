"""Data models for conversations.

These models define messages and session summaries independent of
the transport and of the history service that persists them.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def coerce_role(value: Any) -> Role:
    """Map a role string from the history service onto Role.

    Unrecognized values are clamped to Role.SYSTEM.

    Args:
        value: Raw role value as received

    Returns:
        The matching Role, or Role.SYSTEM for anything unrecognized
    """
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        logger.warning("Unrecognized message role %r, treating as system", value)
        return Role.SYSTEM


class Message(BaseModel):
    """A single message in a conversation.

    Only the content of the most recent assistant message changes,
    and only while a response is streaming.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Role = Field(description="Author of the message")
    content: str = Field(default="", description="Message text")
    created_at: datetime | None = Field(default=None)

    @classmethod
    def from_history(cls, payload: dict[str, Any]) -> "Message":
        """Build a message from a history service record.

        Args:
            payload: Record with at least `role` and `content`

        Returns:
            Message with its role coerced into Role
        """
        data = dict(payload)
        data["role"] = coerce_role(data.get("role"))
        if data.get("id") is None:
            data.pop("id", None)
        else:
            data["id"] = str(data["id"])
        if data.get("content") is None:
            data["content"] = ""
        return cls.model_validate(data)


class Session(BaseModel):
    """Summary of a persisted conversation thread."""

    id: str
    title: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
