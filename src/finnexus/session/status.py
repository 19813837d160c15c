"""Client-visible status state machine.

The status is a projection of the most recent relevant event: each
event overwrites it, nothing is merged, retried or rolled back.

    idle -> connected -> thinking <-> streaming -> connected -> idle
"""

from enum import Enum

from ..protocol import DoneFrame, Frame, StepFrame, TokenFrame


class Status(str, Enum):
    """Status consumed by the presentation layer."""

    IDLE = "idle"              # No open channel
    CONNECTED = "connected"    # Channel open, no turn in progress
    THINKING = "thinking"      # Agent is emitting trace steps
    STREAMING = "streaming"    # Agent is emitting response tokens


class StatusEvent(str, Enum):
    """Events that drive status transitions."""

    CHANNEL_OPEN = "channel_open"
    CHANNEL_CLOSE = "channel_close"
    STEP = "step"
    TOKEN = "token"
    DONE = "done"


_TRANSITIONS: dict[StatusEvent, Status] = {
    StatusEvent.CHANNEL_OPEN: Status.CONNECTED,
    StatusEvent.CHANNEL_CLOSE: Status.IDLE,
    StatusEvent.STEP: Status.THINKING,
    StatusEvent.TOKEN: Status.STREAMING,
    StatusEvent.DONE: Status.CONNECTED,
}


def event_for_frame(frame: Frame) -> StatusEvent | None:
    """Map a decoded frame to its status event.

    Returns:
        The event, or None for frames that leave the status unchanged
    """
    if isinstance(frame, StepFrame):
        return StatusEvent.STEP
    if isinstance(frame, TokenFrame):
        return StatusEvent.TOKEN
    if isinstance(frame, DoneFrame):
        return StatusEvent.DONE
    return None


class StatusMachine:
    """Single writer of the session status."""

    def __init__(self) -> None:
        self._status = Status.IDLE

    @property
    def status(self) -> Status:
        return self._status

    def apply(self, event: StatusEvent) -> bool:
        """Apply an event.

        Args:
            event: Event that occurred

        Returns:
            True if the status changed
        """
        new_status = _TRANSITIONS[event]
        changed = new_status != self._status
        self._status = new_status
        return changed

    def reset(self) -> bool:
        """Return to idle, as on a session switch.

        Returns:
            True if the status changed
        """
        return self.apply(StatusEvent.CHANNEL_CLOSE)
