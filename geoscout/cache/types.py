"""
Core type definitions and protocols for geoscout.cache, dood!
"""

from typing import Protocol, TypeVar

K = TypeVar("K")  # Key type - can be any hashable type
V = TypeVar("V")  # Value type - can be any type
T = TypeVar("T", contravariant=True)  # Generic object type for key generators


class KeyGenerator(Protocol[T]):
    """
    Protocol for generating cache keys from objects, dood!

    A cache applies the same generator on read and write, so equivalent
    objects always land on the same key.

    Example:
        >>> generator = AddressKeyGenerator()
        >>> generator.generateKey(("123 Main St", "Springfield", None, None))
        '123 main st, springfield'
    """

    def generateKey(self, obj: T) -> str:
        """
        Generate string cache key from object.

        Args:
            obj: The object to convert to a cache key

        Returns:
            str: A string representation suitable for use as a cache key
        """
        ...
