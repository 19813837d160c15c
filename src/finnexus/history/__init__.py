"""History module for finnexus.

Provides read access to sessions and messages persisted by the
remote service.
"""

from .base import HistoryClient
from .factory import create_history_client
from .http import HttpHistoryClient
from .in_memory import InMemoryHistoryClient

__all__ = [
    "HistoryClient",
    "HttpHistoryClient",
    "InMemoryHistoryClient",
    "create_history_client",
]
