"""Durable key/value store for the engine's persisted records.

The engine only needs ``load(key)`` and ``save(key, value)`` on strings.
Two backends:

- ``MemoryStore``: a plain dict, used in tests and single-process demos.
- ``RedisStore``: Redis via redis-py with short socket timeouts.

The engine calls ``save`` from inside the event loop (HTTP handlers and the
tick job), so ``RedisStore`` hands writes to one background writer thread
and returns immediately. Only the newest pending value per key is written,
in order, so a slow or unreachable Redis never blocks a request and never
builds a backlog. Reads happen at startup only.

Graceful degradation: if Redis is unavailable, loads return None (so the
engine falls back to defaults) and saves are dropped with an error log.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

import redis

from dosewatch.config import Settings
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)


class DurableStore(Protocol):
    """Minimal persistence contract consumed by the dosage engine."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.records: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self.records.get(key)

    def save(self, key: str, value: str) -> None:
        self.records[key] = value

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


class RedisStore:
    """Redis-backed store. Keys are namespaced with *key_prefix*."""

    def __init__(self, client: redis.Redis, key_prefix: str = "dosewatch:"):
        self._client = client
        self._prefix = key_prefix
        self._lock = threading.Lock()
        self._pending: dict[str, str] = {}
        # A single worker keeps writes to the same key in order
        self._writer = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="dosewatch-redis"
        )

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "dosewatch:") -> "RedisStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        return cls(client, key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def load(self, key: str) -> str | None:
        with self._lock:
            if key in self._pending:
                return self._pending[key]
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError:
            logger.error("Redis unavailable on load; using defaults", key=key)
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    def save(self, key: str, value: str) -> None:
        """Queue *value* for writing and return without waiting for Redis."""
        with self._lock:
            already_queued = key in self._pending
            self._pending[key] = value
        if not already_queued:
            self._writer.submit(self._flush, key)

    def _flush(self, key: str) -> None:
        with self._lock:
            value = self._pending.pop(key, None)
        if value is None:
            return
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError:
            logger.error("Redis unavailable on save; record not persisted", key=key)

    def close(self) -> None:
        """Wait for queued writes, then stop the writer thread."""
        self._writer.shutdown(wait=True)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False


def build_store(config: Settings) -> MemoryStore | RedisStore:
    """Create the store backend selected by ``config.store_backend``."""
    backend = config.store_backend.lower()
    if backend == "redis":
        logger.info("Using Redis durable store", key_prefix=config.redis_key_prefix)
        return RedisStore.from_url(config.redis_url, config.redis_key_prefix)
    if backend != "memory":
        logger.warning("Unknown store backend, using memory", backend=backend)
    return MemoryStore()
