"""Wire protocol for the agent chat channel.

Inbound messages are JSON objects tagged by `type`; outbound messages
are the user's raw text.
"""

from .decoder import decode_frame
from .models import DoneFrame, ErrorFrame, Frame, FrameType, StepFrame, TokenFrame

__all__ = [
    "DoneFrame",
    "ErrorFrame",
    "Frame",
    "FrameType",
    "StepFrame",
    "TokenFrame",
    "decode_frame",
]
