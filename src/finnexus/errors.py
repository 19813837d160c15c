"""Exception hierarchy for finnexus.

Callers can catch FinNexusError to handle every failure raised by the
package, or one of the subclasses for a specific concern.
"""


class FinNexusError(Exception):
    """Base class for all finnexus errors."""


class NotConnectedError(FinNexusError):
    """Raised when sending over a channel that is not open and ready."""


class ChannelError(FinNexusError):
    """Raised when the transport channel cannot be opened or written to."""


class HistoryError(FinNexusError):
    """Raised when the remote history service cannot be reached or answers badly."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
