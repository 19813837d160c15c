"""Factory for creating history clients."""

from typing import Any

from .base import HistoryClient


def create_history_client(
    backend: str = "http",
    **kwargs: Any
) -> HistoryClient:
    """Create a history client.

    Args:
        backend: Backend type ("http" or "memory")
        **kwargs: Backend-specific configuration
            For http:
                - base_url: str (required)
                - timeout: float (default: 10.0)

    Returns:
        HistoryClient instance

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing
    """
    if backend == "http":
        if "base_url" not in kwargs:
            raise TypeError("HTTP history client requires 'base_url' in config")
        from .http import HttpHistoryClient
        return HttpHistoryClient(**kwargs)

    elif backend == "memory":
        from .in_memory import InMemoryHistoryClient
        return InMemoryHistoryClient(**kwargs)

    raise ValueError(
        f"Unsupported history backend: {backend}. "
        f"Supported backends: http, memory"
    )
