"""
Null cache implementation for geoscout.cache, dood!

Implements CacheInterface without storing anything. Used when caching is
disabled in the configuration.
"""

from typing import Any, Dict, Optional

from .interface import CacheInterface
from .types import K, V


class NullCache(CacheInterface[K, V]):
    """No-op cache that never stores anything, dood!

    Useful for:
    - Testing without cache side effects
    - Disabling cache in production
    """

    async def get(self, key: K) -> Optional[V]:
        """Always a cache miss."""
        return None

    async def set(self, key: K, value: V) -> bool:
        """Don't cache, but pretend to succeed."""
        return True

    def clear(self) -> None:
        pass

    def size(self) -> int:
        return 0

    def getStats(self) -> Dict[str, Any]:
        return {"enabled": False}
