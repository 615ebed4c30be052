"""TTL caches used for catalogue and leaderboard reads.

Services receive the cache as an argument (``get_cache`` dependency in the
API, an explicit instance in jobs and tests). ``build_cache`` picks Redis when
``EDUQUIZ_REDIS_URL`` is set and a process-local cache otherwise.
"""

from __future__ import annotations

import logging
import pickle
import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, NamedTuple, Optional, TypeVar

import redis
from cachetools import TLRUCache
from fastapi import Request

from .config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKeys:
    """Centralised cache key names."""

    PRODUCTS_ALL = "products:all"
    TOP_RANKERS = "rankers:"

    @staticmethod
    def rankers(day, limit: int) -> str:
        return f"{CacheKeys.TOP_RANKERS}{day.isoformat()}:{limit}"


class CacheBackend(ABC):
    """Minimal key-value cache contract."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or ``None`` when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` for ``ttl_seconds``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Drop a single key."""

    @abstractmethod
    def delete_by_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix`` and return how many went."""

    @abstractmethod
    def clear(self) -> None:
        """Drop everything this cache owns."""

    def close(self) -> None:
        """Release connections, if any."""

    def get_or_set(self, key: str, ttl_seconds: float, loader: Callable[[], T]) -> T:
        """Return the cached value, calling ``loader`` on a miss.

        ``None`` results are returned but not cached.
        """

        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        if value is not None and ttl_seconds > 0:
            self.set(key, value, ttl_seconds)
        return value


class _Entry(NamedTuple):
    value: Any
    ttl_seconds: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds


class InMemoryCache(CacheBackend):
    """Process-local cache on ``cachetools.TLRUCache`` with a TTL per entry.

    cachetools containers are not thread-safe, so every access holds a lock.
    """

    def __init__(self, maxsize: int = 1024, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=clock)
        self._lock = RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            return None if entry is None else entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = _Entry(value, ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            try:
                del self._entries[key]
            except KeyError:
                pass

    def delete_by_prefix(self, prefix: str) -> int:
        with self._lock:
            self._entries.expire()
            doomed = [key for key in list(self._entries) if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCache(CacheBackend):
    """Cache shared between workers, stored in Redis under ``namespace``.

    Values are pickled. Redis failures are logged and treated as misses so the
    database stays the source of truth.
    """

    def __init__(self, client: redis.Redis, namespace: str = "eduquiz:") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "eduquiz:") -> "RedisCache":
        return cls(redis.Redis.from_url(url), namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as exc:
            logger.warning("cache read failed for %s: %s", key, exc)
            return None
        return None if raw is None else pickle.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            return
        try:
            self._client.set(self._key(key), pickle.dumps(value), px=int(ttl_seconds * 1000))
        except redis.RedisError as exc:
            logger.warning("cache write failed for %s: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            logger.warning("cache delete failed for %s: %s", key, exc)

    def delete_by_prefix(self, prefix: str) -> int:
        try:
            keys = list(self._client.scan_iter(match=f"{self._key(prefix)}*"))
            if keys:
                self._client.delete(*keys)
        except redis.RedisError as exc:
            logger.warning("cache invalidation failed for prefix %s: %s", prefix, exc)
            return 0
        return len(keys)

    def clear(self) -> None:
        self.delete_by_prefix("")

    def close(self) -> None:
        self._client.close()


def build_cache(settings: Settings) -> CacheBackend:
    """Cache backend for the application described by ``settings``."""

    if settings.redis_url:
        logger.info("using redis cache")
        return RedisCache.from_url(settings.redis_url)
    return InMemoryCache(maxsize=settings.cache_maxsize)


def get_cache(request: Request) -> CacheBackend:
    """FastAPI dependency returning the application cache."""

    return request.app.state.cache
