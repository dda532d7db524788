"""
Rate limiter contract shared by MinIntervalRateLimiter and NullRateLimiter.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class RateLimiterInterface(ABC):
    """
    Throttles outgoing provider calls per queue, dood!

    A queue is a provider key such as "nominatim". Queues are independent:
    waiting on one never delays another.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare limiter state, called once before first use."""

    @abstractmethod
    async def destroy(self) -> None:
        """Drop all queue state on shutdown."""

    @abstractmethod
    async def applyLimit(self, queue: str = "default") -> None:
        """
        Suspend until the queue may issue another request, then record it.

        Concurrent callers of one queue pass one at a time. Cancelling a
        waiting caller leaves no trace in the queue history.

        Args:
            queue: Provider key, registered on first use
        """

    @abstractmethod
    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Snapshot of the queue state (last call, next allowed call, ...).

        Raises:
            ValueError: If the queue was never used
        """

    @abstractmethod
    def listQueues(self) -> List[str]:
        """Names of the queues seen so far, e.g. ['nominatim', 'geoapify']."""
