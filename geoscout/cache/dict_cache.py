"""
Dictionary-based in-memory cache implementation.
"""

import logging
from threading import RLock
from typing import Any, Dict, Optional

from .interface import CacheInterface
from .types import K, KeyGenerator, V

logger = logging.getLogger(__name__)


class DictCache(CacheInterface[K, V]):
    """Thread-safe dictionary cache without expiration, dood!

    All access to the underlying dict happens under a lock, so concurrent
    get/set on the same key never observe a partially updated state, both
    from asyncio tasks and from worker threads.

    Args:
        keyGenerator: Optional generator applied to keys on every read
            and write. Keys are used as-is when omitted.
    """

    def __init__(self, keyGenerator: Optional[KeyGenerator[Any]] = None):
        self._keyGenerator = keyGenerator
        self._storage: Dict[Any, V] = {}
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    def _makeKey(self, key: K) -> Any:
        if self._keyGenerator is None:
            return key
        return self._keyGenerator.generateKey(key)

    async def get(self, key: K) -> Optional[V]:
        storageKey = self._makeKey(key)
        with self._lock:
            value = self._storage.get(storageKey)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
        return value

    async def set(self, key: K, value: V) -> bool:
        storageKey = self._makeKey(key)
        with self._lock:
            self._storage[storageKey] = value
        logger.debug(f"Stored cache entry for key: {storageKey}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()
            self._hits = 0
            self._misses = 0
        logger.debug("Cleared all cache data")

    def size(self) -> int:
        with self._lock:
            return len(self._storage)

    def getStats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "enabled": True,
                "entries": len(self._storage),
                "hits": self._hits,
                "misses": self._misses,
            }
