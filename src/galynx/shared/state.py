"""Per-field guarded state holder"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

T = TypeVar("T")


class SharedValue(Generic[T]):
    """A value shared across tasks with one writer at a time

    Readers take no lock and always see a whole value: writers replace
    the reference and never mutate the value in place. Writers serialize
    on the field's own lock, so two fields never block each other.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = asyncio.Lock()

    def get(self) -> T:
        """Return the current value"""
        return self._value

    async def set(self, value: T) -> None:
        """Replace the value under the write lock"""
        async with self._lock:
            self._value = value

    @asynccontextmanager
    async def writing(self) -> AsyncIterator["SharedValue[T]"]:
        """Hold the write lock for a read-modify-write sequence

        Inside the block use ``replace()``; ``set()`` would deadlock.
        """
        async with self._lock:
            yield self

    def replace(self, value: T) -> None:
        """Replace the value; caller must hold ``writing()``"""
        self._value = value
