"""Decoding of inbound payloads into frames.

Decoding never raises: anything that cannot be turned into a known
frame is logged and dropped so the stream keeps flowing.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from .models import Frame, FrameType

logger = logging.getLogger(__name__)

_frame_adapter = TypeAdapter(Frame)

# Characters of a bad payload included in log messages
_LOG_PREVIEW_LENGTH = 200


def _preview(payload: str) -> str:
    if len(payload) > _LOG_PREVIEW_LENGTH:
        return payload[:_LOG_PREVIEW_LENGTH] + "..."
    return payload


def decode_frame(payload: str | bytes) -> Frame | None:
    """Decode one inbound message.

    Args:
        payload: Raw message as delivered by the transport

    Returns:
        The decoded frame, or None if the payload is malformed or of an
        unknown type
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Dropping frame that is not valid UTF-8 (%d bytes)", len(payload))
            return None

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning("Dropping malformed frame %r: %s", _preview(payload), e)
        return None

    if not isinstance(data, dict):
        logger.warning("Dropping frame that is not a JSON object: %r", _preview(payload))
        return None

    frame_type = data.get("type")
    if not isinstance(frame_type, str) or frame_type not in FrameType.ALL:
        logger.debug("Ignoring frame of unknown type %r", frame_type)
        return None

    try:
        return _frame_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(
            "Dropping invalid %s frame: %s",
            frame_type,
            e.errors(include_url=False),
        )
        return None
