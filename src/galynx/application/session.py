"""Process-wide session context shared by every request and the realtime task"""

import asyncio
from dataclasses import dataclass

from galynx.infrastructure.storage import SecureStore
from galynx.shared.state import SharedValue
from galynx.validation.auth import TokenBundle


@dataclass
class RealtimeHandle:
    """Owned handle of the running realtime task

    Created fresh per connect; the shutdown event is set at most once,
    by disconnect. The loop removes its own handle when it terminates.
    """

    shutdown: asyncio.Event
    task: asyncio.Task


class Session:
    """Explicit session context passed to every operation

    Each mutable field has its own guard so that, for example, a token
    refresh never blocks a concurrent read of the API base.

    Attributes:
        store: Secure credential store
        api_base: Current normalized API base
        tokens: Cached TokenBundle, or None when signed out / not loaded
        refresh_lock: Single-flight guard for token refresh
        realtime: Handle of the live realtime task, or None
    """

    def __init__(
        self,
        api_base: str,
        store: SecureStore,
        tokens: TokenBundle | None = None,
    ) -> None:
        self.store = store
        self.api_base: SharedValue[str] = SharedValue(api_base)
        self.tokens: SharedValue[TokenBundle | None] = SharedValue(tokens)
        self.refresh_lock = asyncio.Lock()
        self.realtime: SharedValue[RealtimeHandle | None] = SharedValue(None)

    def endpoint(self, path: str) -> str:
        """Resolve a relative API path against the current API base"""
        return f"{self.api_base.get()}{path}"
