"""
Time-expiring key-value stores backing the OTP gate.

Every OTP record (active code, cooldown, locks, counters) is a string value
written with an explicit TTL and removed by the store once it expires.
Multi-key writes (`set_many`) are all-or-nothing and `add` only writes an
absent key.

- RedisStore: production backend (redis-py), expiry handled by Redis itself.
- MemoryStore: process-local backend for development and tests. Expiry is
  evaluated lazily against an injectable clock, so tests can move time forward.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

import redis

from otp_gate.core.config import Settings
from otp_gate.core.exceptions import StoreError

logger = logging.getLogger(__name__)

Value = Union[str, int]


class KeyValueStore(ABC):
    """Interface of a key-value store with per-key expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored at key, or None if absent or expired."""

    @abstractmethod
    def set(self, key: str, value: Value, ttl_seconds: int) -> None:
        """Store value at key, replacing any previous value and TTL."""

    @abstractmethod
    def add(self, key: str, value: Value, ttl_seconds: int) -> bool:
        """Store value at key only if key is absent. Returns True if written."""

    @abstractmethod
    def set_many(self, items: Mapping[str, Tuple[Value, int]]) -> None:
        """
        Store several keys at once, each with its own TTL.

        Either every key is written or none is.

        Args:
            items: key -> (value, ttl_seconds)
        """

    @abstractmethod
    def delete(self, *keys: str) -> None:
        """Remove keys. Missing keys are ignored."""

    @abstractmethod
    def incr(self, key: str, ttl_seconds: int) -> int:
        """
        Atomically increment the integer at key (creating it at 1) and
        reset its TTL. Returns the new value.
        """

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the store is reachable."""


class RedisStore(KeyValueStore):
    """
    Redis-backed store.

    All redis-py errors are re-raised as StoreError so callers can tell
    infrastructure failures apart from OTP outcomes.
    """

    def __init__(self, client: redis.Redis):
        self.redis_client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisStore":
        """Create a store with a connection pool configured from settings"""
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            decode_responses=True
        )
        return cls(client)

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise StoreError(f"Redis {operation} failed") from e

    def get(self, key: str) -> Optional[str]:
        with self._translate_errors("GET"):
            return self.redis_client.get(key)

    def set(self, key: str, value: Value, ttl_seconds: int) -> None:
        with self._translate_errors("SET"):
            self.redis_client.set(key, value, ex=ttl_seconds)

    def add(self, key: str, value: Value, ttl_seconds: int) -> bool:
        with self._translate_errors("SET NX"):
            return bool(self.redis_client.set(key, value, ex=ttl_seconds, nx=True))

    def set_many(self, items: Mapping[str, Tuple[Value, int]]) -> None:
        if not items:
            return
        # Queued commands are only applied on EXEC
        with self._translate_errors("MULTI SET"):
            pipe = self.redis_client.pipeline(transaction=True)
            for key, (value, ttl_seconds) in items.items():
                pipe.set(key, value, ex=ttl_seconds)
            pipe.execute()

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        with self._translate_errors("DEL"):
            self.redis_client.delete(*keys)

    def incr(self, key: str, ttl_seconds: int) -> int:
        # INCR and EXPIRE run in one MULTI/EXEC block
        with self._translate_errors("INCR"):
            pipe = self.redis_client.pipeline(transaction=True)
            pipe.incr(key)
            pipe.expire(key, ttl_seconds)
            count, _ = pipe.execute()
            return int(count)

    def ping(self) -> bool:
        with self._translate_errors("PING"):
            return bool(self.redis_client.ping())


class MemoryStore(KeyValueStore):
    """
    In-process store with lazy expiry.

    Args:
        clock: Returns the current time in seconds. Defaults to time.monotonic;
            tests pass a controllable clock to simulate TTL expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, float]] = {}

    def _read(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read(key)

    def set(self, key: str, value: Value, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (str(value), self._clock() + ttl_seconds)

    def add(self, key: str, value: Value, ttl_seconds: int) -> bool:
        with self._lock:
            if self._read(key) is not None:
                return False
            self._data[key] = (str(value), self._clock() + ttl_seconds)
            return True

    def set_many(self, items: Mapping[str, Tuple[Value, int]]) -> None:
        with self._lock:
            now = self._clock()
            for key, (value, ttl_seconds) in items.items():
                self._data[key] = (str(value), now + ttl_seconds)

    def delete(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def incr(self, key: str, ttl_seconds: int) -> int:
        with self._lock:
            current = self._read(key)
            try:
                count = int(current or 0) + 1
            except ValueError as e:
                raise StoreError(f"Value at {key} is not an integer") from e
            self._data[key] = (str(count), self._clock() + ttl_seconds)
            return count

    def ping(self) -> bool:
        return True


def create_store(settings: Settings) -> KeyValueStore:
    """Build the store selected by OTP_STORE_BACKEND"""
    if settings.OTP_STORE_BACKEND == "memory":
        logger.warning("Using in-memory OTP store; state is lost on restart and not shared between workers")
        return MemoryStore()
    return RedisStore.from_settings(settings)
