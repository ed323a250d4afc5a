"""RequestExecutor - authenticated HTTP requests with retry policy"""

import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from galynx.shared.exceptions import HttpError, InvalidResponseError, NetworkError

from .tokens import TokenManager

if TYPE_CHECKING:
    from galynx.application.session import Session


class RequestExecutor:
    """Uniform executor for every call against the API base

    Responsibilities:
    - URL resolution against the current API base
    - Bearer credential attachment
    - Retry policy
    - Error mapping

    Retry Strategy:
    - 401 on an authenticated call -> refresh tokens -> retry once
    - 429 -> sleep 200ms, 400ms -> retry (2 retries max)
    - Transport failures are not retried
    The two budgets are counted independently per call.
    """

    MAX_RATE_RETRIES = 2
    RATE_LIMIT_BASE_DELAY = 0.2

    def __init__(
        self,
        session: "Session",
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
    ) -> None:
        """Initialize request executor

        Args:
            session: Session context providing the API base
            token_manager: Token manager for credentials and refresh
            http_client: Shared HTTP client
        """
        self._session = session
        self._token_manager = token_manager
        self._http_client = http_client
        self._sleep = asyncio.sleep

    async def send(
        self,
        method: str,
        path: str,
        body: Any | None = None,
        auth_required: bool = True,
    ) -> Any:
        """Execute a request and decode its JSON body

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE, ...)
            path: Path relative to the API base (e.g., "/me")
            body: JSON payload, if any
            auth_required: Attach the bearer token and refresh on 401

        Returns:
            Decoded JSON body, or None for 204 / empty bodies

        Raises:
            UnauthenticatedError: If auth is required and no session exists
            NetworkError: If the transport fails
            HttpError: If the API answers non-2xx
            InvalidResponseError: If a 2xx body is not valid JSON
        """
        method = method.upper()
        refreshed_once = False
        rate_retry = 0

        while True:
            url = self._session.endpoint(path)
            headers = {}

            if auth_required:
                tokens = await self._token_manager.require_tokens()
                headers["Authorization"] = f"Bearer {tokens.access_token}"

            logger.debug(
                f"{method} {path} (refreshed={refreshed_once}, "
                f"rate_retry={rate_retry})"
            )

            try:
                response = await self._http_client.request(
                    method, url, headers=headers, json=body
                )
            except httpx.RequestError as e:
                logger.warning(f"Network error on {method} {path}: {e}")
                raise NetworkError(str(e)) from e

            status = response.status_code

            if status == 401 and auth_required and not refreshed_once:
                logger.info(f"Unauthorized on {method} {path} - refreshing tokens")
                await self._token_manager.refresh_tokens()
                refreshed_once = True
                continue

            if status == 429 and rate_retry < self.MAX_RATE_RETRIES:
                delay = self.RATE_LIMIT_BASE_DELAY * (2**rate_retry)
                logger.warning(
                    f"Rate limited on {method} {path}, retrying in {delay:.1f}s..."
                )
                await self._sleep(delay)
                rate_retry += 1
                continue

            if status == 204:
                return None

            text = response.text

            if not 200 <= status < 300:
                error = self._http_error(status, text)
                logger.debug(f"{method} {path} failed: {error}")
                raise error

            if not text:
                return None

            try:
                return json.loads(text)
            except ValueError as e:
                raise InvalidResponseError(
                    f"failed to decode json body: {e}"
                ) from e

    def _http_error(self, status: int, text: str) -> HttpError:
        """Map a non-2xx body to HttpError without assuming its shape"""
        try:
            body = json.loads(text)
        except ValueError:
            body = None

        if isinstance(body, dict):
            error = body.get("error")
            message = body.get("message")
            return HttpError(
                status,
                error if isinstance(error, str) else "unknown_error",
                message if isinstance(message, str) else "Request failed",
            )
        return HttpError(status, "http_error", text)
