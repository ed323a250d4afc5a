"""Shared httpx.AsyncClient factory with request/response logging hooks"""

import httpx
from loguru import logger

from galynx.core.logging import install_logging_bridge

USER_AGENT = "galynx-desktop/0.1"


async def _log_httpx_request(request: httpx.Request) -> None:
    """Log outbound httpx requests with headers (auth masked)."""
    headers = {
        k: ("***" if k.lower() == "authorization" else v)
        for k, v in request.headers.items()
    }
    logger.debug(f"HTTPX request: {request.method} {request.url} {headers}")


async def _log_httpx_response(response: httpx.Response) -> None:
    """Log httpx response status; bodies may carry tokens and are skipped."""
    logger.debug(
        f"HTTPX response: status={response.status_code} url={response.url}"
    )


def build_http_client(
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the AsyncClient shared by the executor and token manager

    Args:
        timeout: Per-request timeout in seconds
        transport: Optional transport override (tests pass httpx.MockTransport)
    """
    install_logging_bridge()
    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        headers={"User-Agent": USER_AGENT},
        event_hooks={
            "request": [_log_httpx_request],
            "response": [_log_httpx_response],
        },
    )
