"""API base URL helpers"""

API_SUFFIX = "/api/v1"
REALTIME_PATH = "/ws"


def normalize_api_base(value: str) -> str | None:
    """Normalize an API base into scheme://host[:port]/api/v1

    Examples:
        "http://localhost:3000"       -> "http://localhost:3000/api/v1"
        "https://galynx.local/api/"   -> "https://galynx.local/api/v1"
        "localhost:3000"              -> None

    Args:
        value: Raw user or environment supplied URL

    Returns:
        Canonical API base, or None if the value has no http/https scheme
    """
    base = value.strip().rstrip("/")
    if not base:
        return None

    if not base.startswith(("http://", "https://")):
        return None

    if not base.endswith(API_SUFFIX):
        if base.endswith("/api"):
            base += "/v1"
        else:
            base += API_SUFFIX

    return base


def websocket_url(api_base: str) -> str:
    """Map an API base onto its realtime endpoint (http->ws, https->wss)"""
    url = api_base.rstrip("/")
    if url.startswith("https://"):
        return f"wss://{url[len('https://'):]}{REALTIME_PATH}"
    if url.startswith("http://"):
        return f"ws://{url[len('http://'):]}{REALTIME_PATH}"
    return f"ws://{url}{REALTIME_PATH}"
