"""Construction of channel URLs."""

from urllib.parse import urlencode, urlsplit, urlunsplit

from ..config import DEFAULT_WS_PATH, SESSION_QUERY_PARAM, TOKEN_QUERY_PARAM

# Schemes of an encrypted hosting context
_SECURE_SCHEMES = {"https", "wss"}


def websocket_scheme(base_url: str) -> str:
    """Pick the WebSocket scheme matching the hosting URL.

    Returns:
        "wss" when the base URL is encrypted, otherwise "ws"
    """
    scheme = urlsplit(base_url).scheme.lower()
    return "wss" if scheme in _SECURE_SCHEMES else "ws"


def build_channel_url(
    base_url: str,
    credential: str,
    session_id: str,
    path: str = DEFAULT_WS_PATH
) -> str:
    """Build the chat channel URL for a session.

    Args:
        base_url: URL of the hosting server, e.g. "https://example.com"
        credential: Opaque bearer credential
        session_id: Session the channel belongs to
        path: Path of the chat endpoint

    Returns:
        URL with the credential and session id as query parameters

    Raises:
        ValueError: If base_url has no host

    Example:
        >>> build_channel_url("https://example.com", "abc", "s1")
        'wss://example.com/api/v1/ws/chat?token=abc&session_id=s1'
    """
    parts = urlsplit(base_url)
    if not parts.netloc:
        raise ValueError(f"Base URL has no host: {base_url!r}")

    prefix = parts.path.rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"

    query = urlencode({TOKEN_QUERY_PARAM: credential, SESSION_QUERY_PARAM: session_id})
    return urlunsplit((websocket_scheme(base_url), parts.netloc, prefix + path, query, ""))
