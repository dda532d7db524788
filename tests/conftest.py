"""
Pytest configuration and common fixtures for geoscout tests.

All fixtures follow camelCase naming convention.
"""

import pytest

from geoscout.providers import GeoapifyPlacesClient, NominatimClient
from geoscout.rate_limiter import NullRateLimiter, RateLimiterManager
from geoscout.service import GeocodingService
from tests.utils import FakeUpstream

# ============================================================================
# Upstream Fixtures
# ============================================================================


@pytest.fixture
def nominatimUpstream() -> FakeUpstream:
    """Fake Nominatim server, with no registered responses."""
    return FakeUpstream()


@pytest.fixture
def geoapifyUpstream() -> FakeUpstream:
    """Fake Geoapify server, with no registered responses."""
    return FakeUpstream()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def rateLimiterManager() -> RateLimiterManager:
    """Manager whose limiters never sleep."""
    manager = RateLimiterManager()
    manager.registerRateLimiter("default", NullRateLimiter())
    return manager


@pytest.fixture
def nominatimClient(nominatimUpstream, rateLimiterManager) -> NominatimClient:
    return NominatimClient(
        userAgent="geoscout-tests/1.0",
        rateLimiter=rateLimiterManager,
        transport=nominatimUpstream.transport,
    )


@pytest.fixture
def geoapifyClient(geoapifyUpstream, rateLimiterManager) -> GeoapifyPlacesClient:
    return GeoapifyPlacesClient(
        apiKey="test_geoapify_key",
        rateLimiter=rateLimiterManager,
        transport=geoapifyUpstream.transport,
    )


@pytest.fixture
def geocodingService(nominatimClient, geoapifyClient, rateLimiterManager) -> GeocodingService:
    """
    Service with both providers talking to fake upstreams.

    Example:
        async def testSomething(geocodingService, nominatimUpstream):
            nominatimUpstream.addJson("/search", [])
            ...
    """
    return GeocodingService(nominatimClient, geoapifyClient, rateLimiterManager)
