"""TokenManager - token lifecycle, persistence and single-flight refresh"""

import asyncio
import json
from typing import TYPE_CHECKING

import httpx
from loguru import logger
from pydantic import ValidationError

from galynx.core.config import TOKEN_STORE_KEY
from galynx.shared.exceptions import (
    HttpError,
    InvalidResponseError,
    NetworkError,
    StorageError,
    UnauthenticatedError,
)
from galynx.validation.auth import TokenBundle

if TYPE_CHECKING:
    from galynx.application.session import Session


class TokenManager:
    """Owns the in-memory and persisted TokenBundle

    Responsibilities:
    - Lazy load from the secure store
    - Persist / clear with no partial state
    - Single-flight refresh against /auth/refresh

    A bundle is either entirely present or entirely absent; it is only ever
    replaced wholesale.
    """

    REFRESH_PATH = "/auth/refresh"
    # Refresh rejections with these statuses end the session
    REJECTED_STATUSES = (401, 403)

    def __init__(self, session: "Session", http_client: httpx.AsyncClient) -> None:
        """Initialize token manager

        Args:
            session: Session context holding the token field and refresh guard
            http_client: Shared HTTP client used for the refresh round-trip
        """
        self._session = session
        self._http_client = http_client

    async def get_tokens(self) -> TokenBundle | None:
        """Return the cached bundle, loading it from the store on first use

        Returns:
            TokenBundle, or None if no session is stored

        Raises:
            StorageError: If the store is corrupt or undecryptable
        """
        cached = self._session.tokens.get()
        if cached is not None:
            return cached

        async with self._session.tokens.writing() as field:
            current = field.get()
            if current is not None:
                return current
            loaded = await asyncio.to_thread(self._read_store)
            field.replace(loaded)
            return loaded

    async def require_tokens(self) -> TokenBundle:
        """Like get_tokens(), but absence raises UnauthenticatedError"""
        tokens = await self.get_tokens()
        if tokens is None:
            raise UnauthenticatedError()
        return tokens

    async def persist_tokens(self, tokens: TokenBundle) -> None:
        """Replace the stored and cached bundle

        On failure neither the store nor the cache changes.

        Raises:
            StorageError: If the store cannot be written
        """
        async with self._session.tokens.writing() as field:
            await asyncio.to_thread(self._write_store, tokens)
            field.replace(tokens)
        logger.debug("Token bundle persisted")

    async def clear_tokens(self) -> None:
        """Delete the stored bundle and reset the cache (idempotent)

        Raises:
            StorageError: If the store cannot be written
        """
        async with self._session.tokens.writing() as field:
            await asyncio.to_thread(self._delete_store)
            field.replace(None)
        logger.info("Session tokens cleared")

    async def refresh_tokens(self) -> None:
        """Exchange the refresh token for a new bundle

        Concurrent callers serialize on the session's refresh guard, so only
        one refresh round-trip is in flight at a time. Never retries.

        Raises:
            UnauthenticatedError: If no bundle is stored
            HttpError: If the API rejects the refresh
            NetworkError: If the transport fails
            InvalidResponseError: If the response is not a TokenBundle
            StorageError: If the new bundle cannot be persisted
        """
        async with self._session.refresh_lock:
            current = await self.require_tokens()
            url = self._session.endpoint(self.REFRESH_PATH)

            logger.info("Refreshing access token...")
            try:
                response = await self._http_client.post(
                    url, json={"refresh_token": current.refresh_token}
                )
            except httpx.RequestError as e:
                raise NetworkError(str(e)) from e

            status = response.status_code
            text = response.text

            if not 200 <= status < 300:
                error = self._refresh_error(status, text)
                logger.warning(f"Token refresh rejected ({status}): {error.error}")
                if status in self.REJECTED_STATUSES:
                    await self.clear_tokens()
                raise error

            try:
                refreshed = TokenBundle.model_validate(json.loads(text))
            except (ValueError, ValidationError) as e:
                raise InvalidResponseError(f"refresh response invalid: {e}") from e

            await self.persist_tokens(refreshed)
            logger.info("Access token refreshed")

    def _refresh_error(self, status: int, text: str) -> HttpError:
        try:
            body = json.loads(text)
        except ValueError:
            body = None

        if isinstance(body, dict):
            error = body.get("error")
            message = body.get("message")
            return HttpError(
                status,
                error if isinstance(error, str) else "unauthorized",
                message if isinstance(message, str) else "refresh failed",
            )
        return HttpError(status, "refresh_failed", text)

    def _read_store(self) -> TokenBundle | None:
        raw = self._session.store.get(TOKEN_STORE_KEY)
        if raw is None:
            return None
        try:
            return TokenBundle.model_validate(raw)
        except ValidationError as e:
            raise StorageError(f"could not deserialize stored tokens: {e}") from e

    def _write_store(self, tokens: TokenBundle) -> None:
        store = self._session.store
        with store.batch():
            store.ensure_writable()
            previous = store.get(TOKEN_STORE_KEY)
            store.set(TOKEN_STORE_KEY, tokens.model_dump())
            try:
                store.save()
            except StorageError:
                if previous is None:
                    store.delete(TOKEN_STORE_KEY)
                else:
                    store.set(TOKEN_STORE_KEY, previous)
                raise

    def _delete_store(self) -> None:
        store = self._session.store
        with store.batch():
            store.ensure_writable()
            previous = store.get(TOKEN_STORE_KEY)
            store.delete(TOKEN_STORE_KEY)
            try:
                store.save()
            except StorageError:
                if previous is not None:
                    store.set(TOKEN_STORE_KEY, previous)
                raise
