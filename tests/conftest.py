"""Pytest fixtures for Galynx core tests"""

from collections.abc import Callable

import httpx
import pytest

from galynx.application.events import EventBus
from galynx.application.session import Session
from galynx.infrastructure.api import GalynxClient, build_http_client
from galynx.infrastructure.storage import SecureStore
from galynx.validation import TokenBundle
from tests.helpers.payloads import API_BASE, TEST_ITERATIONS, token_payload


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "secure-tokens.bin"


@pytest.fixture
def store(store_path) -> SecureStore:
    """Empty secure store backed by a temp file"""
    return SecureStore(store_path, "test-secret", iterations=TEST_ITERATIONS)


@pytest.fixture
def tokens() -> TokenBundle:
    return TokenBundle(**token_payload())


@pytest.fixture
def session(store) -> Session:
    """Signed-out session against the test API base"""
    return Session(api_base=API_BASE, store=store)


@pytest.fixture
def make_client(session) -> Callable[..., GalynxClient]:
    """Factory building a GalynxClient over an httpx.MockTransport

    Usage:
        client = make_client(handler)          # handler(request) -> Response
        client = make_client(handler, connect=fake_connect)
    """

    def factory(handler, connect=None, event_bus=None) -> GalynxClient:
        http_client = build_http_client(5.0, transport=httpx.MockTransport(handler))
        return GalynxClient(
            session, http_client, event_bus or EventBus(), connect=connect
        )

    return factory


@pytest.fixture
def signed_in(session, store, tokens) -> Session:
    """Session whose tokens are both persisted and cached"""
    store.set("auth_tokens", tokens.model_dump())
    store.save()
    session.tokens.replace(tokens)
    return session
