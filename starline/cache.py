"""
Cache stores for downloaded stargazer pages.

Keys are exact page URLs and values are the page's raw starred_at strings.
An absent or expired key reads as None.
"""

import asyncio
import hashlib
import json
import os
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from starline.exceptions import CacheError

# 30 days
CACHE_TTL_SECONDS = 86400 * 30


class StarCache(ABC):
    """Abstract base class for page caches."""

    @abstractmethod
    async def get(self, key: str) -> list[str] | None:
        """Return the cached value, or None on a miss or an expired entry."""
        pass

    @abstractmethod
    async def put(self, key: str, value: list[str], ttl: int = CACHE_TTL_SECONDS) -> None:
        """Store a value that expires after `ttl` seconds."""
        pass


class NullCache(StarCache):
    """Cache that never stores anything."""

    async def get(self, key: str) -> list[str] | None:
        return None

    async def put(self, key: str, value: list[str], ttl: int = CACHE_TTL_SECONDS) -> None:
        return None


class MemoryCache(StarCache):
    """Process-local cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """
        Initialize an empty cache.

        Args:
            clock: Returns the current time in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, tuple[float, list[str]]] = {}

    async def get(self, key: str) -> list[str] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return list(value)

    async def put(self, key: str, value: list[str], ttl: int = CACHE_TTL_SECONDS) -> None:
        self._entries[key] = (self._clock() + ttl, list(value))

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


class FileCache(StarCache):
    """
    Cache backed by one JSON file per key.

    Files are named by the SHA-256 of the key and hold `expires_at` (epoch
    seconds), `key` and `value`. Survives between runs of the CLI. File I/O
    runs in a worker thread so it does not block the event loop.
    """

    def __init__(self, directory: str | Path, clock: Callable[[], float] = time.time) -> None:
        """
        Initialize the cache, creating the directory if needed.

        Args:
            directory: Where cache files are kept
            clock: Returns the current time in seconds (injectable for tests)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    async def get(self, key: str) -> list[str] | None:
        return await asyncio.to_thread(self._read, key)

    async def put(self, key: str, value: list[str], ttl: int = CACHE_TTL_SECONDS) -> None:
        await asyncio.to_thread(self._write, key, value, ttl)

    def _read(self, key: str) -> list[str] | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            entry = json.loads(raw)
            expires_at = float(entry["expires_at"])
            value = entry["value"]
        except (ValueError, KeyError, TypeError) as e:
            raise CacheError(f"Corrupt cache file {path}: {e}") from e

        if not isinstance(value, list):
            raise CacheError(f"Corrupt cache file {path}: value is not a list")

        if self._clock() >= expires_at:
            path.unlink(missing_ok=True)
            return None
        return value

    def _write(self, key: str, value: list[str], ttl: int) -> None:
        path = self.path_for(key)
        entry = {"expires_at": self._clock() + ttl, "key": key, "value": list(value)}
        # Write then rename so concurrent readers never see a partial file
        tmp_path = path.with_name(f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        tmp_path.write_text(json.dumps(entry), encoding="utf-8")
        tmp_path.replace(path)


class RedisCache(StarCache):
    """
    Cache shared through Redis.

    Values are JSON-encoded and expiry is left to Redis (SET ... EX ttl).
    """

    def __init__(self, client: Any, prefix: str = "starline:") -> None:
        """
        Initialize with an existing client.

        Args:
            client: A `redis.asyncio.Redis` instance (or anything with async get/set)
            prefix: Prepended to every key
        """
        self._client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "starline:") -> "RedisCache":
        """Create a cache from a redis:// URL."""
        import redis.asyncio as redis

        return cls(redis.from_url(url), prefix=prefix)

    async def get(self, key: str) -> list[str] | None:
        raw = await self._client.get(self.prefix + key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            raise CacheError(f"Corrupt cache entry for {key}: {e}") from e
        if not isinstance(value, list):
            raise CacheError(f"Corrupt cache entry for {key}: value is not a list")
        return value

    async def put(self, key: str, value: list[str], ttl: int = CACHE_TTL_SECONDS) -> None:
        await self._client.set(self.prefix + key, json.dumps(list(value)), ex=ttl)

    async def close(self) -> None:
        await self._client.aclose()
