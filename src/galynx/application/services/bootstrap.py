"""Session bootstrap: resolve the API base, build the client, probe the session"""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
from loguru import logger

from galynx.application.events import EventBus
from galynx.application.session import Session
from galynx.core.config import API_BASE_STORE_KEY, DEFAULT_API_BASE, Config
from galynx.infrastructure.api import GalynxClient, build_http_client
from galynx.infrastructure.storage import SecureStore
from galynx.shared.exceptions import ApiError, StorageError
from galynx.shared.urls import normalize_api_base


def load_stored_api_base(store: SecureStore) -> str | None:
    """Read the persisted API base, if any

    A store that cannot be read counts as "nothing stored": the API base
    has a default, unlike the session tokens.
    """
    try:
        raw = store.get(API_BASE_STORE_KEY)
    except StorageError as e:
        logger.warning(f"Could not read stored API base: {e}")
        return None

    if not isinstance(raw, str):
        return None
    return normalize_api_base(raw)


def resolve_api_base(override: str | None, stored: str | None) -> str:
    """Pick the API base: environment override > stored > default"""
    for candidate in (override, stored):
        if candidate:
            normalized = normalize_api_base(candidate)
            if normalized is not None:
                return normalized
    return DEFAULT_API_BASE


async def validate_stored_session(client: GalynxClient) -> None:
    """Probe /me with the stored session, clearing tokens if it fails

    Failures are logged, never raised: a dead session just means the user
    has to sign in again.
    """
    try:
        tokens = await client.tokens.get_tokens()
    except StorageError as e:
        logger.warning(f"Stored session unreadable: {e}")
        return

    if tokens is None:
        logger.debug("No stored session")
        return

    try:
        user = await client.me()
    except ApiError as e:
        logger.warning(f"Stored session invalid, clearing tokens: {e}")
        try:
            await client.tokens.clear_tokens()
        except StorageError as clear_error:
            logger.warning(f"Could not clear stored tokens: {clear_error}")
        return

    logger.info(f"Stored session is valid ({user.email})")


async def bootstrap(
    config: Config,
    event_bus: EventBus | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    connect: Callable[..., Any] | None = None,
    validate: bool = True,
) -> GalynxClient:
    """Construct the session and client for this process

    Args:
        config: Loaded configuration
        event_bus: Event bus for realtime events (a new one if omitted)
        transport: Optional httpx transport override (for testing)
        connect: Optional websocket connect factory (for testing)
        validate: Probe the stored session before returning

    Returns:
        Ready-to-use GalynxClient
    """
    store = SecureStore(config.store_path, config.store_secret)
    logger.debug(f"Secure store: {store.path}")
    stored = await asyncio.to_thread(load_stored_api_base, store)
    api_base = resolve_api_base(config.api_base_override, stored)
    logger.info(f"Using API base {api_base}")

    session = Session(api_base=api_base, store=store)
    http_client = build_http_client(config.request_timeout, transport=transport)
    client = GalynxClient(
        session, http_client, event_bus or EventBus(), connect=connect
    )

    if validate:
        await validate_stored_session(client)
    return client
