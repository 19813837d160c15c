"""Conversation data model and response assembly."""

from .assembler import ResponseAssembler
from .models import Message, Role, Session, coerce_role

__all__ = [
    "Message",
    "ResponseAssembler",
    "Role",
    "Session",
    "coerce_role",
]
