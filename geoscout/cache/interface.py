"""
Abstract cache interface for geoscout.cache, dood!

Caches here live for the life of the service instance: there is no
expiration and no eviction, entries disappear only on clear().
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional

from .types import K, V


class CacheInterface(ABC, Generic[K, V]):
    """
    Key-value store for provider results, parametrized by key and value type.

    Example:
        >>> cache: CacheInterface[str, GeocodeResult] = DictCache(keyGenerator=AddressKeyGenerator())
        >>> await cache.set("123 Main St, Springfield", result)
        >>> await cache.get("123 main st,  springfield")  # same normalized key
        GeocodeResult(...)
    """

    @abstractmethod
    async def get(self, key: K) -> Optional[V]:
        """Stored value for key, None on a miss."""

    @abstractmethod
    async def set(self, key: K, value: V) -> bool:
        """
        Store value under key, replacing any previous value.

        Returns:
            False if the value was rejected, True otherwise
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry. Synchronous, visible to the next get()."""

    @abstractmethod
    def size(self) -> int:
        """Number of stored entries."""

    @abstractmethod
    def getStats(self) -> Dict[str, Any]:
        """Implementation specific counters (entries, hits, misses, ...)."""
