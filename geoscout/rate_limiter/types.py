"""Type definitions for the rate limiter package."""

import sys
from typing import Any, Dict, NotRequired

if sys.version_info >= (3, 14):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class RateLimiterConfig(TypedDict):
    """Configuration for a rate limiter instance.

    Attributes:
        type: The type of rate limiter ("interval" or "null")
        config: Keyword arguments for the limiter config
            (e.g. {"minIntervalSeconds": 1.0} for "interval")
    """

    type: str
    config: NotRequired[Dict[str, Any]]


class RateLimiterManagerConfig(TypedDict, closed=False):
    """Configuration for the rate limiter manager.

    Attributes:
        ratelimiters: Dictionary mapping rate limiter names to their configurations
        queues: Dictionary mapping queue names to rate limiter names
    """

    ratelimiters: NotRequired[Dict[str, RateLimiterConfig]]
    queues: NotRequired[Dict[str, str]]
