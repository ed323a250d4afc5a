"""Galynx API client

Components:
- TokenManager: token lifecycle, encrypted persistence, single-flight refresh
- RequestExecutor: authenticated requests with 401/429 retry policy
- RealtimeClient: reconnecting websocket event stream
- GalynxClient: facade exposing the domain operations
"""

from galynx.infrastructure.api.facade import GalynxClient
from galynx.infrastructure.api.http import build_http_client
from galynx.infrastructure.api.realtime import RealtimeClient, next_backoff
from galynx.infrastructure.api.requests import RequestExecutor
from galynx.infrastructure.api.tokens import TokenManager

__all__ = [
    "GalynxClient",
    "RealtimeClient",
    "RequestExecutor",
    "TokenManager",
    "build_http_client",
    "next_backoff",
]
