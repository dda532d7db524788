import logging
from typing import Any, Dict, List, Optional

from .interface import RateLimiterInterface
from .min_interval import IntervalConfig, MinIntervalRateLimiter
from .null_limiter import NullRateLimiter
from .types import RateLimiterConfig, RateLimiterManagerConfig

logger = logging.getLogger(__name__)

DEFAULT_LIMITER_NAME = "default"


class RateLimiterManager:
    """
    Routes provider queues to named rate limiters, dood!

    The service creates one manager and passes it to every provider client,
    so clients of the same upstream share one limiter. Each manager owns its
    own registry (no process-wide instance), which keeps tests independent.

    Queues without an explicit binding go to the default limiter: the first
    registered one, or the one chosen with setDefaultLimiter().

    Usage:
        >>> manager = RateLimiterManager()
        >>> manager.registerRateLimiter("osm", MinIntervalRateLimiter(IntervalConfig(minIntervalSeconds=1.0)))
        >>> manager.registerRateLimiter("unlimited", NullRateLimiter())
        >>> manager.bindQueue("nominatim", "osm")
        >>> manager.bindQueue("geoapify", "unlimited")
        >>> await manager.applyLimit("nominatim")  # at most once per second
    """

    def __init__(self):
        self._limiters: Dict[str, RateLimiterInterface] = {}
        self._bindings: Dict[str, str] = {}
        self._defaultName: Optional[str] = None

    @classmethod
    def forQueue(cls, queue: str, limiter: RateLimiterInterface) -> "RateLimiterManager":
        """Manager with a single limiter named and bound after the queue.

        Provider clients built without a shared manager use this.
        """
        manager = cls()
        manager.registerRateLimiter(queue, limiter)
        manager.bindQueue(queue, queue)
        return manager

    @staticmethod
    def _createLimiter(limiterConfig: RateLimiterConfig) -> RateLimiterInterface:
        limiterType = limiterConfig["type"].lower()
        if limiterType == "interval":
            return MinIntervalRateLimiter(IntervalConfig(**limiterConfig.get("config", {})))
        if limiterType == "null":
            return NullRateLimiter()
        raise ValueError(f"Unknown rate limiter type '{limiterConfig['type']}'")

    async def loadConfig(self, config: RateLimiterManagerConfig) -> None:
        """
        Create limiters and queue bindings from the [ratelimiter] section.

        Example config (TOML):
            [ratelimiter.ratelimiters.osm]
            type = "interval"
            config = { minIntervalSeconds = 1.0 }

            [ratelimiter.queues]
            nominatim = "osm"

        A NullRateLimiter named "default" is added unless configured, and
        becomes the default limiter.

        Raises:
            ValueError: On unknown limiter type or a queue bound to an unknown limiter
        """
        for limiterName, limiterConfig in config.get("ratelimiters", {}).items():
            limiter = self._createLimiter(limiterConfig)
            await limiter.initialize()
            self.registerRateLimiter(limiterName, limiter)

        for queueName, limiterName in config.get("queues", {}).items():
            self.bindQueue(queueName, limiterName)

        if DEFAULT_LIMITER_NAME not in self._limiters:
            fallback = NullRateLimiter()
            await fallback.initialize()
            self.registerRateLimiter(DEFAULT_LIMITER_NAME, fallback)
        self.setDefaultLimiter(DEFAULT_LIMITER_NAME)

        logger.debug(f"Rate limiters loaded: {self.listRateLimiters()}, bindings: {self._bindings}")

    def registerRateLimiter(self, name: str, limiter: RateLimiterInterface) -> None:
        """
        Add a named limiter. The first one becomes the default.

        Raises:
            ValueError: If the name is taken
        """
        if name in self._limiters:
            raise ValueError(f"Rate limiter '{name}' is already registered")

        self._limiters[name] = limiter
        if self._defaultName is None:
            self._defaultName = name

        logger.info(f"Registered rate limiter {type(limiter).__name__} with name '{name}'")

    def setDefaultLimiter(self, name: str) -> None:
        """
        Raises:
            ValueError: If the limiter is not registered
        """
        self._requireLimiter(name)
        self._defaultName = name
        logger.debug(f"Default rate limiter is now '{name}', dood!")

    def bindQueue(self, queue: str, limiterName: str) -> None:
        """
        Route a queue to a registered limiter.

        Raises:
            ValueError: If the limiter is not registered
        """
        self._requireLimiter(limiterName)
        self._bindings[queue] = limiterName
        logger.info(f"Bound queue '{queue}' to rate limiter '{limiterName}'")

    def _requireLimiter(self, name: str) -> None:
        if name not in self._limiters:
            raise ValueError(f"Rate limiter '{name}' is not registered")

    def _resolve(self, queue: str) -> RateLimiterInterface:
        limiterName = self._bindings.get(queue, self._defaultName)
        if limiterName is None:
            raise RuntimeError(f"No rate limiter available for queue '{queue}', dood!")
        return self._limiters[limiterName]

    async def applyLimit(self, queue: str = "default") -> None:
        """
        Wait for the limiter serving the queue.

        Raises:
            RuntimeError: If nothing is registered
        """
        await self._resolve(queue).applyLimit(queue)

    def getStats(self, queue: str = "default") -> Dict[str, Any]:
        """
        Statistics of the queue from the limiter serving it.

        Raises:
            RuntimeError: If nothing is registered
            ValueError: If the limiter has not seen the queue yet
        """
        return self._resolve(queue).getStats(queue)

    def getLimiter(self, name: str) -> Optional[RateLimiterInterface]:
        return self._limiters.get(name)

    def listRateLimiters(self) -> List[str]:
        return list(self._limiters)

    def getQueueMappings(self) -> Dict[str, str]:
        return dict(self._bindings)

    def getDefaultLimiter(self) -> Optional[str]:
        return self._defaultName

    async def destroy(self) -> None:
        """
        Destroy every limiter and forget all bindings, call on shutdown.

        A limiter failing to destroy is logged and does not stop the others.
        """
        for name, limiter in self._limiters.items():
            try:
                await limiter.destroy()
            except Exception as e:
                logger.error(f"Error destroying rate limiter '{name}': {e}")

        self._limiters.clear()
        self._bindings.clear()
        self._defaultName = None
        logger.info("RateLimiterManager destroyed, dood!")
