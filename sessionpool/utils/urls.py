from urllib.parse import urlsplit, urlunsplit

REALTIME_PATH = "/connection/websocket"
PRIVATE_CHANNEL_PREFIX = "#"

_TO_HTTP = {"ws": "http", "wss": "https"}


def normalize_broker_url(raw_url: str) -> str:
    """
    Map a broker URL to its HTTP form (ws -> http, wss -> https).
    Raises ValueError if the URL has no host or an unsupported scheme.
    """
    parts = urlsplit(raw_url.strip())
    scheme = _TO_HTTP.get(parts.scheme.lower(), parts.scheme.lower())
    if scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"Can't parse centrifugo url {raw_url}")
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def realtime_endpoint(broker_url: str) -> str:
    """
    Build the WebSocket endpoint of the broker: http -> ws, anything else
    -> wss, with the realtime path appended to the configured one.
    """
    parts = urlsplit(broker_url)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Can't parse centrifugo url {broker_url}")
    scheme = "ws" if parts.scheme.lower() == "http" else "wss"
    path = parts.path.rstrip("/") + REALTIME_PATH
    return urlunsplit((scheme, parts.netloc, path, parts.query, ""))


def private_channel(session_id: str) -> str:
    return f"{PRIVATE_CHANNEL_PREFIX}{session_id}"
