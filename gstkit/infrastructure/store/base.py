# gstkit/infrastructure/store/base.py
"""
Key-value store contract and the read-modify-write collection helper.

Collections (history lists, preset lists, ...) are stored as one JSON blob
per key. Updates read the whole blob, change it in memory and write it back;
an ``asyncio.Lock`` per key keeps overlapping coroutines in this process from
losing each other's writes. Separate processes sharing a key still follow
last-write-wins.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable, Protocol


class KeyValueStore(Protocol):
    """Opaque JSON key-value store; values are JSON-compatible structures."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def remove_many(self, keys: list[str]) -> None: ...


class JsonCollection:
    """List-valued documents in a ``KeyValueStore`` with per-key locking."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock(self, key: str) -> asyncio.Lock:
        return self._locks[key]

    async def read(self, key: str) -> list[Any]:
        value = await self.store.get(key)
        return list(value) if value else []

    async def update(self, key: str, mutate: Callable[[list[Any]], list[Any] | None]) -> list[Any]:
        """Apply ``mutate`` to the stored list under the key lock and write it back.

        ``mutate`` may change the list in place (returning None) or return a
        replacement list.
        """
        async with self.lock(key):
            items = await self.read(key)
            replaced = mutate(items)
            if replaced is not None:
                items = replaced
            await self.store.set(key, items)
            return items
