"""Session management for finnexus.

Module structure:
- status.py: Status state machine (how status is derived from events)
- callbacks.py: Observer interface (how consumers learn about changes)
- manager.py: Session manager (channel lifecycle and conversation state)
"""

from .callbacks import SessionCallback
from .manager import SessionManager
from .status import Status, StatusEvent, StatusMachine, event_for_frame

__all__ = [
    "SessionCallback",
    "SessionManager",
    "Status",
    "StatusEvent",
    "StatusMachine",
    "event_for_frame",
]
