"""User record cache.

Explicit cache port used around the single-record read/update/delete paths
of UserService. Keys are the user id or the (lower-cased) user email.

Backends:
- In-memory TTL cache (default for dev and tests)
- Redis (when REDIS_URL is set or USER_CACHE_BACKEND=redis)
- Null backend (USER_CACHE_BACKEND=none) to disable caching
"""

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Optional, Union

from userservice.models.constants import (
    DEFAULT_CACHE_MAX_SIZE,
    DEFAULT_CACHE_TTL_SEC,
    USERS_CACHE_NAME,
)
from userservice.models.user import UserRecord

logger = logging.getLogger(__name__)

CacheKey = Union[int, str]


def _log_entry_event(action: str, key: str) -> None:
    logger.info(f"Cache entry {action} [map= '{USERS_CACHE_NAME}', key '{key}']")


class CacheBackend(ABC):
    """Abstract interface for cache backends (values are JSON strings)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: float) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


@dataclass
class CacheEntry:
    """Single cache entry with creation time."""

    value: str
    created_at: float = field(default_factory=time.time)

    def is_expired(self, ttl_seconds: float) -> bool:
        return time.time() - self.created_at > ttl_seconds


class InMemoryCacheBackend(CacheBackend):
    """Thread-safe in-memory cache with TTL; evicts the oldest entry when full."""

    def __init__(self, max_size: int = DEFAULT_CACHE_MAX_SIZE, ttl_seconds: float = DEFAULT_CACHE_TTL_SEC):
        self._cache: Dict[str, CacheEntry] = {}
        self._max_size = max_size
        self._ttl_seconds = ttl_seconds
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._ttl_seconds):
                del self._cache[key]
                _log_entry_event("has expired", key)
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: float = None) -> None:
        with self._lock:
            if len(self._cache) >= self._max_size and key not in self._cache:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
                _log_entry_event("has been evicted", oldest_key)
            action = "has been updated" if key in self._cache else "has been added"
            self._cache[key] = CacheEntry(value=value)
        _log_entry_event(action, key)

    def delete(self, key: str) -> None:
        with self._lock:
            removed = self._cache.pop(key, None)
        if removed is not None:
            _log_entry_event("has been removed", key)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.info(f"Cache has been cleared: {USERS_CACHE_NAME}")


class RedisCacheBackend(CacheBackend):
    """Redis-backed cache shared across service instances."""

    CACHE_PREFIX = f"{USERS_CACHE_NAME}::"

    def __init__(self, redis_url: str, ttl_seconds: float = DEFAULT_CACHE_TTL_SEC):
        import redis

        self._client = redis.from_url(redis_url, decode_responses=True)
        self._ttl_seconds = ttl_seconds

    def get(self, key: str) -> Optional[str]:
        return self._client.get(f"{self.CACHE_PREFIX}{key}")

    def set(self, key: str, value: str, ttl_seconds: float = None) -> None:
        ttl = int(ttl_seconds or self._ttl_seconds)
        self._client.setex(f"{self.CACHE_PREFIX}{key}", ttl, value)
        _log_entry_event("has been added", key)

    def delete(self, key: str) -> None:
        if self._client.delete(f"{self.CACHE_PREFIX}{key}"):
            _log_entry_event("has been removed", key)

    def clear(self) -> None:
        keys = self._client.keys(f"{self.CACHE_PREFIX}*")
        if keys:
            self._client.delete(*keys)
        logger.info(f"Cache has been cleared: {USERS_CACHE_NAME}")


class NullCacheBackend(CacheBackend):
    """Caching disabled."""

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str, ttl_seconds: float = None) -> None:
        return None

    def delete(self, key: str) -> None:
        return None

    def clear(self) -> None:
        return None


class UserCache:
    """Cache port for user records: get / put / evict.

    Backend failures are logged and treated as a miss; the database stays
    the source of truth.
    """

    def __init__(self, backend: CacheBackend, ttl_seconds: float = DEFAULT_CACHE_TTL_SEC):
        self._backend = backend
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key(value: CacheKey) -> str:
        """Normalize an id or email into a cache key."""
        return str(value).strip().lower()

    def get(self, key: CacheKey) -> Optional[UserRecord]:
        try:
            data = self._backend.get(self.key(key))
        except Exception as e:
            logger.warning(f"Cache read failed for key '{key}': {type(e).__name__}: {str(e)}")
            return None
        if data is None:
            return None
        try:
            return UserRecord.model_validate(json.loads(data))
        except ValueError as e:
            # pydantic's ValidationError is a ValueError
            logger.warning(f"Discarding unreadable cache entry for key '{key}': {type(e).__name__}")
            self.evict(key)
            return None

    def put(self, key: CacheKey, record: UserRecord) -> None:
        try:
            self._backend.set(self.key(key), record.model_dump_json(by_alias=True), self._ttl_seconds)
        except Exception as e:
            logger.warning(f"Cache write failed for key '{key}': {type(e).__name__}: {str(e)}")

    def evict(self, key: CacheKey) -> None:
        try:
            self._backend.delete(self.key(key))
        except Exception as e:
            logger.warning(f"Cache evict failed for key '{key}': {type(e).__name__}: {str(e)}")

    def clear(self) -> None:
        self._backend.clear()


def create_cache_backend() -> CacheBackend:
    """Pick a backend from USER_CACHE_BACKEND / REDIS_URL."""
    backend = os.getenv("USER_CACHE_BACKEND", "").strip().lower()
    redis_url = os.getenv("REDIS_URL", "").strip()
    ttl_seconds = float(os.getenv("USER_CACHE_TTL_SEC", str(DEFAULT_CACHE_TTL_SEC)))
    max_size = int(os.getenv("USER_CACHE_MAX_SIZE", str(DEFAULT_CACHE_MAX_SIZE)))

    if backend == "none":
        return NullCacheBackend()
    if backend == "memory" or not redis_url:
        if backend == "redis":
            logger.warning("USER_CACHE_BACKEND=redis but REDIS_URL is not set; using in-memory cache")
        return InMemoryCacheBackend(max_size, ttl_seconds)

    try:
        redis_backend = RedisCacheBackend(redis_url, ttl_seconds)
        # Test connection
        redis_backend._client.ping()
        return redis_backend
    except Exception as e:
        logger.warning(f"Redis cache unavailable, using in-memory cache: {type(e).__name__}: {str(e)}")
        return InMemoryCacheBackend(max_size, ttl_seconds)


# Global cache instance
_user_cache: Optional[UserCache] = None


def get_user_cache() -> UserCache:
    """Get or create the global user cache (also the FastAPI dependency)."""
    global _user_cache
    if _user_cache is None:
        ttl_seconds = float(os.getenv("USER_CACHE_TTL_SEC", str(DEFAULT_CACHE_TTL_SEC)))
        _user_cache = UserCache(create_cache_backend(), ttl_seconds)
    return _user_cache


def reset_user_cache() -> None:
    """Reset the global cache (for testing)."""
    global _user_cache
    _user_cache = None
