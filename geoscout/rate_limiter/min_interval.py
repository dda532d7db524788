import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

from .interface import RateLimiterInterface

logger = logging.getLogger(__name__)


@dataclass
class IntervalConfig:
    """
    Configuration for minimum interval rate limiting.

    Attributes:
        minIntervalSeconds: Minimum time between two consecutive calls
            to the same queue, in seconds
    """

    minIntervalSeconds: float

    def __post_init__(self):
        """Validate configuration values"""
        if self.minIntervalSeconds <= 0:
            raise ValueError("minIntervalSeconds must be positive")


class MinIntervalRateLimiter(RateLimiterInterface):
    """
    Rate limiter enforcing a minimum interval between consecutive calls.

    Used for quota-constrained providers such as public Nominatim
    (at most one request per second). Every queue keeps the time its last
    call was let through; a new call waits until minIntervalSeconds have
    passed since then. The interval is measured from call issuance, not
    from call completion.

    Thread Safety:
        Uses asyncio.Lock per queue, so concurrent callers queue up instead
        of racing past the interval. Cancelling a waiting caller does not
        consume a slot.

    Example:
        >>> limiter = MinIntervalRateLimiter(IntervalConfig(minIntervalSeconds=1.0))
        >>> await limiter.initialize()
        >>> await limiter.applyLimit("nominatim")  # returns immediately
        >>> await limiter.applyLimit("nominatim")  # waits ~1 second
    """

    def __init__(
        self,
        config: IntervalConfig,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the minimum interval rate limiter.

        Args:
            config: Interval configuration applied to all queues
            clock: Monotonic time source in seconds (injectable for tests)
            sleep: Async sleep function (injectable for tests)
        """
        self._config = config
        self._clock = clock
        self._sleep = sleep
        self._lastCall: Dict[str, float] = {}
        self._callCounts: Dict[str, int] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lockLoops: Dict[str, asyncio.AbstractEventLoop] = {}
        self._initialized = False

    async def initialize(self) -> None:
        if self._initialized:
            logger.warning("MinIntervalRateLimiter already initialized")
            return

        self._initialized = True
        logger.info(f"MinIntervalRateLimiter initialized with {self._config.minIntervalSeconds}s interval, dood!")

    async def destroy(self) -> None:
        self._lastCall.clear()
        self._callCounts.clear()
        self._locks.clear()
        self._lockLoops.clear()
        self._initialized = False
        logger.info("MinIntervalRateLimiter destroyed, dood!")

    def _ensureQueue(self, queue: str) -> None:
        if queue not in self._locks:
            self._callCounts[queue] = 0
            logger.debug(f"Auto-registered queue '{queue}', dood!")

        # asyncio.Lock binds to the loop it first waits on, one lock per loop
        loop = asyncio.get_running_loop()
        if self._lockLoops.get(queue) is not loop:
            self._locks[queue] = asyncio.Lock()
            self._lockLoops[queue] = loop

    async def applyLimit(self, queue: str = "default") -> None:
        """
        Wait until the queue allows another call, then record it.

        Args:
            queue: Name of the queue to apply rate limiting to.
                   Auto-registered on first use.
        """
        self._ensureQueue(queue)

        async with self._locks[queue]:
            currentTime = self._clock()
            lastCall = self._lastCall.get(queue)

            if lastCall is not None:
                waitTime = self._config.minIntervalSeconds - (currentTime - lastCall)
                if waitTime > 0:
                    logger.debug(f"Rate limit reached for queue '{queue}', waiting {waitTime:.3f} seconds, dood!")
                    await self._sleep(waitTime)
                    currentTime = self._clock()

            self._lastCall[queue] = currentTime
            self._callCounts[queue] += 1

    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Get current rate limiting statistics for a queue.

        Returns:
            Dictionary containing:
            - lastCallTime: Clock value of the last permitted call (or None)
            - nextAllowedTime: Earliest clock value for the next call
            - minIntervalSeconds: Configured interval
            - totalCalls: Number of calls let through

        Raises:
            ValueError: If the queue doesn't exist
        """
        if queue not in self._locks:
            raise ValueError(f"Queue '{queue}' does not exist")

        lastCall = self._lastCall.get(queue)
        return {
            "lastCallTime": lastCall,
            "nextAllowedTime": (
                lastCall + self._config.minIntervalSeconds if lastCall is not None else self._clock()
            ),
            "minIntervalSeconds": self._config.minIntervalSeconds,
            "totalCalls": self._callCounts[queue],
        }

    def listQueues(self) -> List[str]:
        return list(self._locks.keys())
