# gstkit/infrastructure/store/redis_store.py

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from gstkit.core.errors import StorageError

logger = logging.getLogger("redis_store")


class RedisStore:
    """``KeyValueStore`` backed by Redis; every value is a JSON string."""

    def __init__(self, redis_url: str | None = None, prefix: str = "", client: redis.Redis | None = None):
        if client is None:
            if not redis_url:
                raise RuntimeError("REDIS_URL is not set")
            client = redis.from_url(redis_url, decode_responses=True)
        self._r = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._r.get(self._key(key))
        except RedisError as exc:
            logger.exception("Failed to read %s", key)
            raise StorageError(f"Could not read {key}", key=key) from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Stored value for %s is not valid JSON", key)
            raise StorageError(f"Corrupt value stored under {key}", key=key) from exc

    async def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Value for {key} is not JSON serialisable", key=key) from exc
        try:
            await self._r.set(self._key(key), payload)
        except RedisError as exc:
            logger.exception("Failed to write %s", key)
            raise StorageError(f"Could not write {key}", key=key) from exc

    async def remove(self, key: str) -> None:
        try:
            await self._r.delete(self._key(key))
        except RedisError as exc:
            logger.exception("Failed to delete %s", key)
            raise StorageError(f"Could not delete {key}", key=key) from exc

    async def remove_many(self, keys: list[str]) -> None:
        if not keys:
            return
        try:
            await self._r.delete(*(self._key(k) for k in keys))
        except RedisError as exc:
            logger.exception("Failed to delete %s", keys)
            raise StorageError(f"Could not delete {', '.join(keys)}") from exc

    async def close(self) -> None:
        await self._r.aclose()
