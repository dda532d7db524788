"""
Rate Limiter Package

Outbound rate limiting for quota-constrained providers, with support
for multiple independent queues (one per provider) and a manager mapping
queues to limiter backends.

Example:
    >>> from geoscout.rate_limiter import (
    ...     IntervalConfig,
    ...     MinIntervalRateLimiter,
    ...     NullRateLimiter,
    ...     RateLimiterManager,
    ... )
    >>>
    >>> manager = RateLimiterManager()
    >>> limiter = MinIntervalRateLimiter(IntervalConfig(minIntervalSeconds=1.0))
    >>> await limiter.initialize()
    >>> manager.registerRateLimiter("nominatim", limiter)
    >>> manager.bindQueue("nominatim", "nominatim")
    >>>
    >>> await manager.applyLimit("nominatim")
"""

from .interface import RateLimiterInterface
from .manager import RateLimiterManager
from .min_interval import IntervalConfig, MinIntervalRateLimiter
from .null_limiter import NullRateLimiter
from .types import RateLimiterConfig, RateLimiterManagerConfig

__all__ = [
    "RateLimiterInterface",
    "RateLimiterManager",
    "MinIntervalRateLimiter",
    "NullRateLimiter",
    "IntervalConfig",
    "RateLimiterConfig",
    "RateLimiterManagerConfig",
]
