"""GalynxClient - high-level facade over the Galynx API

Composes the token manager, request executor and realtime client around
one Session and exposes the domain operations the frontend invokes.
Every domain call goes through the executor, so the 401 and 429 policies
apply uniformly.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

import httpx
from loguru import logger

from galynx.core.config import API_BASE_STORE_KEY
from galynx.shared.exceptions import (
    ApiError,
    HttpError,
    InvalidResponseError,
    NetworkError,
    StorageError,
)
from galynx.shared.urls import normalize_api_base
from galynx.validation import (
    Attachment,
    AttachmentPresign,
    AuthSession,
    Channel,
    Message,
    MessageList,
    ThreadSummary,
    TokenBundle,
    User,
    decode_list,
    decode_model,
    map_attachment_commit_response,
)

from .realtime import RealtimeClient
from .requests import RequestExecutor
from .tokens import TokenManager

if TYPE_CHECKING:
    from galynx.application.events.event_bus import EventBus
    from galynx.application.session import Session

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _page_query(limit: int | None, cursor: str | None) -> str:
    """Build the limit/cursor query, clamping limit to [1, 100]"""
    size = DEFAULT_PAGE_SIZE if limit is None else limit
    params: dict[str, Any] = {"limit": max(1, min(size, MAX_PAGE_SIZE))}
    if cursor:
        params["cursor"] = cursor
    return urlencode(params)


def _segment(value: str) -> str:
    return quote(value, safe="")


class GalynxClient:
    """Galynx API client

    Usage:
        client = GalynxClient(session, http_client, event_bus)
        auth = await client.login("ana@example.com", "secret")
        channels = await client.list_channels()
        await client.realtime_connect()
    """

    def __init__(
        self,
        session: "Session",
        http_client: httpx.AsyncClient,
        event_bus: "EventBus",
        connect: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize client

        Args:
            session: Session context shared by every component
            http_client: Shared HTTP client
            event_bus: Destination of realtime events
            connect: Optional websocket connect factory (for testing)
        """
        self.session = session
        self.event_bus = event_bus
        self._http_client = http_client
        self.tokens = TokenManager(session, http_client)
        self.requests = RequestExecutor(session, self.tokens, http_client)
        self.realtime = RealtimeClient(
            session, self.tokens, event_bus, connect=connect
        )

    async def aclose(self) -> None:
        """Stop the realtime loop and event bus, close the HTTP client"""
        await self.realtime.disconnect()
        if self.event_bus.is_running:
            await self.event_bus.stop()
        await self._http_client.aclose()

    async def login(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session and fetch the user profile"""
        raw = await self.requests.send(
            "POST",
            "/auth/login",
            {"email": email, "password": password},
            auth_required=False,
        )
        tokens = decode_model(TokenBundle, raw)
        await self.tokens.persist_tokens(tokens)
        logger.info(f"Signed in as {email}")

        user = await self.me()
        return AuthSession.from_parts(tokens, user)

    async def me(self) -> User:
        return decode_model(User, await self.requests.send("GET", "/me"))

    async def logout(self) -> None:
        """Revoke the refresh token (best effort) and clear the session"""
        try:
            tokens = await self.tokens.require_tokens()
        except ApiError:
            tokens = None

        if tokens is not None:
            try:
                await self.requests.send(
                    "POST",
                    "/auth/logout",
                    {"refresh_token": tokens.refresh_token},
                    auth_required=False,
                )
            except ApiError as e:
                logger.warning(f"Logout request failed, clearing anyway: {e}")

        await self.tokens.clear_tokens()

    async def list_channels(self) -> list[Channel]:
        return decode_list(Channel, await self.requests.send("GET", "/channels"))

    async def create_channel(self, name: str, is_private: bool = False) -> Channel:
        raw = await self.requests.send(
            "POST", "/channels", {"name": name, "is_private": is_private}
        )
        return decode_model(Channel, raw)

    async def delete_channel(self, channel_id: str) -> None:
        await self.requests.send("DELETE", f"/channels/{_segment(channel_id)}")

    async def list_messages(
        self,
        channel_id: str,
        limit: int | None = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> MessageList:
        """Fetch one page of channel messages

        Args:
            channel_id: Channel to read
            limit: Page size, clamped to [1, 100]
            cursor: Opaque cursor from a previous page's next_cursor
        """
        path = (
            f"/channels/{_segment(channel_id)}/messages?"
            f"{_page_query(limit, cursor)}"
        )
        return decode_model(MessageList, await self.requests.send("GET", path))

    async def send_message(self, channel_id: str, body_md: str) -> Message:
        raw = await self.requests.send(
            "POST",
            f"/channels/{_segment(channel_id)}/messages",
            {"body_md": body_md},
        )
        return decode_model(Message, raw)

    async def edit_message(self, message_id: str, body_md: str) -> Message:
        raw = await self.requests.send(
            "PATCH", f"/messages/{_segment(message_id)}", {"body_md": body_md}
        )
        return decode_model(Message, raw)

    async def delete_message(self, message_id: str) -> None:
        await self.requests.send("DELETE", f"/messages/{_segment(message_id)}")

    async def get_thread(self, root_id: str) -> ThreadSummary:
        raw = await self.requests.send("GET", f"/threads/{_segment(root_id)}")
        return decode_model(ThreadSummary, raw)

    async def list_thread_replies(
        self,
        root_id: str,
        limit: int | None = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> MessageList:
        path = (
            f"/threads/{_segment(root_id)}/replies?"
            f"{_page_query(limit, cursor)}"
        )
        return decode_model(MessageList, await self.requests.send("GET", path))

    async def send_thread_reply(self, root_id: str, body_md: str) -> Message:
        raw = await self.requests.send(
            "POST",
            f"/threads/{_segment(root_id)}/replies",
            {"body_md": body_md},
        )
        return decode_model(Message, raw)

    async def upload_attachment(
        self,
        channel_id: str,
        message_id: str,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> Attachment:
        """Upload bytes and attach them to a message

        Flow: presign -> PUT bytes to the presigned URL -> commit.
        The PUT goes straight to storage, without the bearer token.

        Raises:
            NetworkError: If the upload transport fails
            HttpError: If any step is rejected
        """
        size = len(data)
        presign = decode_model(
            AttachmentPresign,
            await self.requests.send(
                "POST",
                "/attachments/presign",
                {
                    "channel_id": channel_id,
                    "filename": filename,
                    "content_type": content_type,
                    "size_bytes": size,
                },
            ),
        )

        logger.info(f"Uploading {filename} ({size} bytes)")
        try:
            response = await self._http_client.put(
                presign.upload_url,
                content=data,
                headers={"Content-Type": content_type},
            )
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        if not response.is_success:
            raise HttpError(
                response.status_code, "upload_failed", "binary upload failed"
            )

        commit_raw = await self.requests.send(
            "POST",
            "/attachments/commit",
            {"upload_id": presign.upload_id, "message_id": message_id},
        )
        return map_attachment_commit_response(
            commit_raw, filename, size, content_type, presign.key
        )

    def get_api_base(self) -> str:
        return self.session.api_base.get()

    async def set_api_base(self, value: str) -> str:
        """Normalize, persist and apply a new API base

        Returns:
            The normalized API base

        Raises:
            InvalidResponseError: If the value is not an http(s) URL
            StorageError: If it cannot be persisted (in-memory value kept)
        """
        normalized = normalize_api_base(value)
        if normalized is None:
            raise InvalidResponseError("invalid API base URL")

        async with self.session.api_base.writing() as field:
            await asyncio.to_thread(self._write_api_base, normalized)
            field.replace(normalized)

        logger.info(f"API base set to {normalized}")
        return normalized

    def _write_api_base(self, api_base: str) -> None:
        store = self.session.store
        with store.batch():
            store.ensure_writable()
            previous = store.get(API_BASE_STORE_KEY)
            store.set(API_BASE_STORE_KEY, api_base)
            try:
                store.save()
            except StorageError:
                if previous is None:
                    store.delete(API_BASE_STORE_KEY)
                else:
                    store.set(API_BASE_STORE_KEY, previous)
                raise

    async def realtime_connect(self) -> None:
        """Start the realtime loop, and the event bus delivering its events"""
        if not self.event_bus.is_running:
            await self.event_bus.start()
        await self.realtime.connect()

    async def realtime_disconnect(self) -> None:
        await self.realtime.disconnect()
