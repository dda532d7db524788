"""
No-op rate limiter for providers that throttle on their side.
"""

from typing import Any, Dict, List

from .interface import RateLimiterInterface


class NullRateLimiter(RateLimiterInterface):
    """Rate limiter that never waits, dood!

    Useful for:
    - Paid APIs with their own server-side throttling
    - Tests that must not sleep
    """

    def __init__(self):
        self._callCounts: Dict[str, int] = {}

    async def initialize(self) -> None:
        pass

    async def destroy(self) -> None:
        self._callCounts.clear()

    async def applyLimit(self, queue: str = "default") -> None:
        self._callCounts[queue] = self._callCounts.get(queue, 0) + 1

    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        if queue not in self._callCounts:
            raise ValueError(f"Queue '{queue}' does not exist")
        return {"enabled": False, "totalCalls": self._callCounts[queue]}

    def listQueues(self) -> List[str]:
        return list(self._callCounts.keys())
