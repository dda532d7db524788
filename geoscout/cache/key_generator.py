"""
Address key generation for geocoding caches.

The same normalization is used for cache reads and writes, so queries that
differ only in case or whitespace share one cache entry.
"""

from typing import Optional, Sequence

from .types import KeyGenerator

AddressParts = Sequence[Optional[str]]


def buildFullAddress(
    address: str,
    city: Optional[str] = None,
    state: Optional[str] = None,
    postalCode: Optional[str] = None,
) -> str:
    """Join address components into a single query string, dood!

    Empty or missing components are skipped; the rest are joined by ", ".

    Example:
        >>> buildFullAddress("123 Main St", "Springfield")
        '123 Main St, Springfield'
    """
    parts = [part.strip() for part in (address, city, state, postalCode) if part and part.strip()]
    return ", ".join(parts)


class AddressKeyGenerator(KeyGenerator[AddressParts]):
    """
    Key generator for (address, city, state, postalCode) tuples.

    Key format: lowercase, trimmed full address with inner whitespace runs
    collapsed to a single space.

    Example:
        >>> generator = AddressKeyGenerator()
        >>> generator.generateKey(("  123 MAIN St ", "springfield", None, None))
        '123 main st, springfield'
    """

    def generateKey(self, obj: AddressParts) -> str:
        if isinstance(obj, str):
            fullAddress = obj
        else:
            fullAddress = buildFullAddress(*obj)
        return " ".join(fullAddress.lower().split())
