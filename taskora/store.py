"""Persistent key/value stores backing the note repository.

Every backend is a synchronous string-keyed map of string values. The
repository treats the store as the source of truth; the cache in front of it
may be dropped at any time.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import redis

from taskora.errors import StoreUnavailableError
from taskora.metrics import STORE_OPERATIONS

logger = logging.getLogger(__name__)

DEFAULT_REDIS_PREFIX = "taskora:"


class PersistentStore(ABC):
    """Durable key -> string map."""

    backend = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is missing."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """All stored keys, sorted."""

    def close(self) -> None:
        """Release backend resources."""

    def _count(self, operation: str) -> None:
        STORE_OPERATIONS.labels(backend=self.backend, operation=operation).inc()


class MemoryStore(PersistentStore):
    """Dict-backed store for tests and throwaway sessions."""

    backend = "memory"

    def __init__(self, data: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        self._count("get")
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._count("set")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._count("remove")
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore(PersistentStore):
    """Store persisted as one JSON object in a local file."""

    backend = "json"

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        """Load values from disk. Creates the file if missing."""
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
                self._data = {str(k): str(v) for k, v in raw.items()}
                logger.info("Loaded %d keys from %s", len(self._data), self._path)
            except (json.JSONDecodeError, ValueError) as exc:
                logger.error("Failed to load store: %s; starting fresh", exc)
                self._data = {}
        else:
            logger.info("No storage file found at %s; starting fresh", self._path)
            self._persist()

    def _persist(self) -> None:
        """Write current state to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(
            json.dumps(self._data, indent=2, sort_keys=True, ensure_ascii=False),
            encoding="utf-8",
        )
        tmp.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        self._count("get")
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._count("set")
        self._data[key] = value
        self._persist()

    def remove(self, key: str) -> None:
        self._count("remove")
        if self._data.pop(key, None) is not None:
            self._persist()

    def keys(self) -> list[str]:
        return sorted(self._data)


class RedisStore(PersistentStore):
    """Store backed by a Redis server, with keys under a namespace prefix."""

    backend = "redis"

    def __init__(self, redis_url: str, prefix: str = DEFAULT_REDIS_PREFIX) -> None:
        self._redis_url = redis_url
        self._prefix = prefix
        self._client: Optional[redis.Redis] = None

    @property
    def available(self) -> bool:
        """Whether the Redis connection is active."""
        return self._client is not None

    def connect(self) -> bool:
        """Connect to Redis. Non-fatal if Redis is unavailable."""
        try:
            self._client = redis.Redis.from_url(self._redis_url, decode_responses=True)
            self._client.ping()
            logger.info("Redis store connected: %s", self._redis_url)
        except (redis.RedisError, ValueError) as e:
            logger.warning("Redis unavailable: %s", e)
            self._client = None
        return self.available

    def close(self) -> None:
        """Close the Redis connection."""
        if self._client:
            self._client.close()
            self._client = None

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise StoreUnavailableError(f"Redis store not connected: {self._redis_url}")
        return self._client

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        client = self._require_client()
        self._count("get")
        return client.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        client = self._require_client()
        self._count("set")
        client.set(self._key(key), value)

    def remove(self, key: str) -> None:
        client = self._require_client()
        self._count("remove")
        client.delete(self._key(key))

    def keys(self) -> list[str]:
        client = self._require_client()
        found: list[str] = []
        for key in client.scan_iter(match=f"{self._prefix}*", count=100):
            found.append(key[len(self._prefix):])
        return sorted(found)
