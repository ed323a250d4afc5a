"""RealtimeClient - reconnecting websocket event stream"""

import asyncio
import json
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

import websockets
from loguru import logger
from websockets.exceptions import InvalidURI, WebSocketException
from websockets.uri import parse_uri

from galynx.application.session import RealtimeHandle
from galynx.domain.models.event import (
    REALTIME_EVENT,
    REALTIME_STATUS,
    Event,
    RealtimeStatus,
    typed_event_name,
)
from galynx.shared.exceptions import ApiError, RealtimeError
from galynx.shared.urls import websocket_url
from galynx.validation.auth import TokenBundle

from .tokens import TokenManager

if TYPE_CHECKING:
    from galynx.application.events.event_bus import EventBus
    from galynx.application.session import Session

MIN_BACKOFF_SECONDS = 1
MAX_BACKOFF_SECONDS = 30


def next_backoff(current: int) -> int:
    """Double the reconnect delay within [1, 30] seconds"""
    return max(MIN_BACKOFF_SECONDS, min(current * 2, MAX_BACKOFF_SECONDS))


class RealtimeClient:
    """Manages the realtime task lifecycle and its reconnect loop

    States: Connecting -> Online -> Reconnecting -> Offline (terminal)

    Responsibilities:
    - At most one loop per session (connect is a no-op while one runs)
    - Bearer-authenticated handshake per connect attempt
    - Frame decoding and emission to the event bus
    - Exponential backoff between attempts
    - Cooperative shutdown at connect, mid-read and mid-backoff
    """

    def __init__(
        self,
        session: "Session",
        token_manager: TokenManager,
        event_bus: "EventBus",
        connect: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize realtime client

        Args:
            session: Session context holding the API base and task handle
            token_manager: Token manager consulted on every connect attempt
            event_bus: Destination of status and frame events
            connect: websockets-compatible connect factory (for testing)
        """
        self._session = session
        self._token_manager = token_manager
        self._event_bus = event_bus
        self._connect = connect or websockets.connect

    @property
    def is_running(self) -> bool:
        handle = self._session.realtime.get()
        return handle is not None and not handle.task.done()

    async def connect(self) -> None:
        """Start the realtime loop unless one is already active"""
        async with self._session.realtime.writing() as field:
            handle = field.get()
            if handle is not None and not handle.task.done():
                logger.debug("Realtime loop already running")
                return

            shutdown = asyncio.Event()
            task = asyncio.create_task(
                self._run(shutdown), name="galynx-realtime"
            )
            field.replace(RealtimeHandle(shutdown=shutdown, task=task))
            logger.info("Realtime loop started")

    async def disconnect(self) -> None:
        """Signal shutdown and wait for the running loop to exit"""
        async with self._session.realtime.writing() as field:
            handle = field.get()
            if handle is None:
                return
            field.replace(None)
            handle.shutdown.set()
            # Field lock stays held so a new connect cannot overlap the old task
            await asyncio.gather(handle.task, return_exceptions=True)
        logger.info("Realtime loop stopped")

    async def _run(self, shutdown: asyncio.Event) -> None:
        try:
            await self._loop(shutdown)
        except Exception as e:
            logger.opt(exception=e).error(f"Realtime loop crashed: {e}")
            await self._emit_status(RealtimeStatus.OFFLINE)
        finally:
            await self._release_handle(shutdown)

    async def _loop(self, shutdown: asyncio.Event) -> None:
        backoff = MIN_BACKOFF_SECONDS

        while True:
            ws_url = websocket_url(self._session.api_base.get())
            await self._emit_status(RealtimeStatus.RECONNECTING)

            try:
                tokens = await self._token_manager.require_tokens()
            except ApiError as e:
                logger.info(f"Realtime loop has no session, going offline: {e}")
                await self._emit_status(RealtimeStatus.OFFLINE)
                return

            try:
                headers = self._build_handshake(ws_url, tokens)
            except RealtimeError as e:
                logger.warning(f"Could not create ws request: {e}")
                await self._emit_status(RealtimeStatus.OFFLINE)
                return

            if shutdown.is_set():
                await self._emit_status(RealtimeStatus.OFFLINE)
                return

            try:
                stopped = await self._until_shutdown(
                    self._attempt(ws_url, headers), shutdown
                )
            except (OSError, TimeoutError, WebSocketException) as e:
                logger.warning(f"ws connect failed: {e}")
            else:
                if stopped:
                    await self._emit_status(RealtimeStatus.OFFLINE)
                    return
                backoff = MIN_BACKOFF_SECONDS
                logger.info("Realtime connection ended")

            if await self._wait_for_shutdown(shutdown, backoff):
                await self._emit_status(RealtimeStatus.OFFLINE)
                return
            backoff = next_backoff(backoff)

    def _build_handshake(
        self, ws_url: str, tokens: TokenBundle
    ) -> dict[str, str]:
        """Validate the endpoint and build handshake headers

        Raises:
            RealtimeError: If the URL or the credential cannot form a request
        """
        try:
            parse_uri(ws_url)
        except InvalidURI as e:
            raise RealtimeError(str(e)) from e

        if any(c in tokens.access_token for c in "\r\n"):
            raise RealtimeError("access token is not a valid header value")

        return {"Authorization": f"Bearer {tokens.access_token}"}

    async def _attempt(self, ws_url: str, headers: dict[str, str]) -> None:
        """Open one connection and read frames until it ends"""
        async with self._connect(ws_url, additional_headers=headers) as ws:
            await self._emit_status(RealtimeStatus.ONLINE)
            logger.info(f"Realtime connected: {ws_url}")
            await self._read_frames(ws)

    async def _until_shutdown(
        self, attempt: Coroutine[Any, Any, None], shutdown: asyncio.Event
    ) -> bool:
        """Run a connection attempt, abandoning it when shutdown is signaled

        Covers the handshake as well as the read phase, so a shutdown never
        waits out the connect timeout.

        Returns:
            True if shutdown was signaled

        Raises:
            Whatever the attempt raised
        """
        shutdown_task = asyncio.create_task(shutdown.wait())
        attempt_task = asyncio.create_task(attempt)
        try:
            await asyncio.wait(
                {shutdown_task, attempt_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (shutdown_task, attempt_task):
                task.cancel()
            await asyncio.gather(
                shutdown_task, attempt_task, return_exceptions=True
            )

        if shutdown.is_set():
            return True
        attempt_task.result()
        return False

    async def _read_frames(self, ws: Any) -> None:
        try:
            async for message in ws:
                await self._dispatch_frame(message)
        except (OSError, WebSocketException) as e:
            logger.warning(f"ws receive error: {e}")

    async def _dispatch_frame(self, message: str | bytes) -> None:
        if not isinstance(message, str):
            return

        try:
            payload = json.loads(message)
        except ValueError:
            logger.debug("Skipping non-JSON realtime frame")
            return

        await self._emit(REALTIME_EVENT, payload)
        if isinstance(payload, dict):
            event_type = payload.get("event_type")
            if isinstance(event_type, str) and event_type:
                await self._emit(typed_event_name(event_type), payload)

    async def _wait_for_shutdown(
        self, shutdown: asyncio.Event, seconds: float
    ) -> bool:
        """Sleep for the backoff, waking early on shutdown

        Returns:
            True if shutdown was signaled
        """
        logger.info(f"Realtime reconnecting in {seconds}s...")
        try:
            await asyncio.wait_for(shutdown.wait(), timeout=seconds)
        except TimeoutError:
            return False
        return True

    async def _emit_status(self, status: RealtimeStatus) -> None:
        await self._emit(REALTIME_STATUS, status.to_payload())

    async def _emit(self, name: str, payload: Any) -> None:
        try:
            await self._event_bus.publish(Event(name=name, data=payload))
        except Exception as e:
            logger.warning(f"failed to emit event {name}: {e}")

    async def _release_handle(self, shutdown: asyncio.Event) -> None:
        """Drop this loop's handle unless disconnect already took it"""
        handle = self._session.realtime.get()
        if handle is None or handle.shutdown is not shutdown:
            return
        async with self._session.realtime.writing() as field:
            current = field.get()
            if current is not None and current.shutdown is shutdown:
                field.replace(None)
