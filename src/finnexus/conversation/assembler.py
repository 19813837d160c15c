"""Assembly of streamed tokens into assistant messages.

Hides how token fragments are accumulated and merged into the
message list.
"""

from datetime import datetime

from .models import Message, Role


class ResponseAssembler:
    """Accumulates token fragments for the assistant message being streamed.

    The buffer holds the full text received for the current turn. Each
    token replaces the content of the open assistant message with the
    whole buffer, so the message always mirrors the buffer exactly.
    """

    def __init__(self) -> None:
        self._buffer: list[str] = []

    @property
    def text(self) -> str:
        """Text accumulated for the current turn."""
        return "".join(self._buffer)

    def reset(self) -> None:
        """Start a new turn with an empty buffer."""
        self._buffer = []

    def add_token(self, messages: list[Message], content: str) -> Message:
        """Append a token and upsert the assistant message.

        Args:
            messages: Conversation message list, modified in place
            content: Token fragment to append

        Returns:
            The assistant message holding the current buffer
        """
        self._buffer.append(content)
        text = self.text

        last = messages[-1] if messages else None
        if last is None or last.role == Role.USER:
            message = Message(role=Role.ASSISTANT, content=text, created_at=datetime.now())
            messages.append(message)
            return message

        last.content = text
        return last
