"""
geoscout.cache - In-memory result caching, dood!

Core Components:
- CacheInterface: Abstract base class for all cache implementations
- DictCache: Thread-safe dictionary-based cache (no TTL, no eviction)
- NullCache: No-op cache for disabled caching and tests
- AddressKeyGenerator: Normalized keys for geocoding queries

Example Usage:
    >>> from geoscout.cache import AddressKeyGenerator, DictCache
    >>>
    >>> cache = DictCache(keyGenerator=AddressKeyGenerator())
    >>> await cache.set(("123 Main St", "Springfield", None, None), result)
    >>> await cache.get(("123 MAIN ST", " springfield", None, None))  # same entry
"""

from .dict_cache import DictCache
from .interface import CacheInterface
from .key_generator import AddressKeyGenerator, buildFullAddress
from .null_cache import NullCache
from .types import K, KeyGenerator, T, V

__all__ = [
    "KeyGenerator",
    "K",
    "V",
    "T",
    "CacheInterface",
    "DictCache",
    "NullCache",
    "AddressKeyGenerator",
    "buildFullAddress",
]
