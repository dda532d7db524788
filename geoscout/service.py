"""
Geocoding service facade, dood!

GeocodingService is the single entry point used by applications: it owns
the provider clients, the shared rate limiter manager and the proximity
search chain, and exposes geocoding, reverse geocoding and place lookups.
"""

import logging
from typing import Iterable, List, Optional

from geoscout.cache import AddressKeyGenerator, CacheInterface, DictCache, NullCache
from geoscout.config import ConfigManager
from geoscout.distance import distanceKm
from geoscout.exceptions import ConfigurationError, GeoError
from geoscout.models import GeocodeResult, PlaceSearchRequest, PlaceSearchResult, ReverseGeocodeResult
from geoscout.providers import GeoapifyPlacesClient, NominatimClient, PlacesProviderInterface
from geoscout.proximity import ProximitySearch
from geoscout.rate_limiter import IntervalConfig, MinIntervalRateLimiter, RateLimiterManager
from geoscout.service_types import getCategoriesForServiceType, getSearchQueryForServiceType

logger = logging.getLogger(__name__)


class GeocodingService:
    """Geocoding and places lookup over Nominatim and Geoapify.

    Place searches by service type go through ProximitySearch: Geoapify
    category search first (when an API key is configured), Nominatim text
    search as fallback.

    Example:
        >>> configManager = ConfigManager("config.toml")
        >>> service = await GeocodingService.fromConfig(configManager)
        >>> location = await service.geocodeAddress("123 Main St", city="Springfield")
        >>> vets = await service.findNearbyByServiceType(location.latitude, location.longitude, "veterinary")
        >>> await service.destroy()
    """

    def __init__(
        self,
        nominatimClient: NominatimClient,
        geoapifyClient: Optional[GeoapifyPlacesClient] = None,
        rateLimiterManager: Optional[RateLimiterManager] = None,
    ):
        """
        Args:
            nominatimClient: Geocoder and text search provider
            geoapifyClient: Optional category search provider
            rateLimiterManager: Manager shared by the clients, destroyed
                together with the service
        """
        self.nominatimClient = nominatimClient
        self.geoapifyClient = geoapifyClient
        self.rateLimiterManager = rateLimiterManager

        providers: List[PlacesProviderInterface] = []
        if geoapifyClient is not None:
            providers.append(geoapifyClient)
        providers.append(nominatimClient)
        self.proximitySearch = ProximitySearch(providers)

        logger.info(f"GeocodingService initialized with places providers: {self.proximitySearch.listProviders()}")

    @classmethod
    async def fromConfig(cls, configManager: ConfigManager) -> "GeocodingService":
        """Build the service from [nominatim], [geoapify], [cache] and [ratelimiter] sections, dood!

        The "nominatim" queue gets a MinIntervalRateLimiter using
        nominatim.min-interval unless [ratelimiter] binds it explicitly.
        Unbound queues use the default limiter, which never waits unless
        configured otherwise.
        """
        nominatimConfig = configManager.getNominatimConfig()
        geoapifyConfig = configManager.getGeoapifyConfig()

        rateLimiterManager = RateLimiterManager()
        await rateLimiterManager.loadConfig(configManager.getRateLimiterConfig())

        if "nominatim" not in rateLimiterManager.getQueueMappings():
            if "nominatim" not in rateLimiterManager.listRateLimiters():
                limiter = MinIntervalRateLimiter(
                    IntervalConfig(minIntervalSeconds=float(nominatimConfig.get("min-interval", 1.0)))
                )
                await limiter.initialize()
                rateLimiterManager.registerRateLimiter("nominatim", limiter)
            rateLimiterManager.bindQueue("nominatim", "nominatim")

        cache: CacheInterface[str, GeocodeResult]
        if configManager.getCacheConfig().get("enabled", True):
            cache = DictCache(keyGenerator=AddressKeyGenerator())
        else:
            logger.info("Geocoding cache is disabled")
            cache = NullCache()

        nominatimClient = NominatimClient(
            baseUrl=nominatimConfig.get("base-url"),
            userAgent=nominatimConfig.get("user-agent"),
            requestTimeout=nominatimConfig.get("timeout", 10),
            cache=cache,
            rateLimiter=rateLimiterManager,
            rateLimiterQueue="nominatim",
            acceptLanguage=nominatimConfig.get("accept-language"),
        )

        geoapifyClient = GeoapifyPlacesClient(
            apiKey=configManager.getGeoapifyApiKey(),
            baseUrl=geoapifyConfig.get("base-url"),
            requestTimeout=geoapifyConfig.get("timeout", 30),
            rateLimiter=rateLimiterManager,
            rateLimiterQueue="geoapify",
            acceptLanguage=geoapifyConfig.get("accept-language"),
        )

        return cls(nominatimClient, geoapifyClient, rateLimiterManager)

    async def geocodeAddress(
        self,
        address: str,
        city: Optional[str] = None,
        state: Optional[str] = None,
        postalCode: Optional[str] = None,
    ) -> GeocodeResult:
        """Convert an address into coordinates (cached).

        Raises:
            GeocodeError: If the address could not be geocoded
            MalformedResponseError: If the provider payload is unusable
        """
        return await self.nominatimClient.geocode(address, city=city, state=state, postalCode=postalCode)

    async def reverseGeocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Convert coordinates into an address (never cached).

        Raises:
            ReverseGeocodeError: If no address was found
        """
        return await self.nominatimClient.reverseGeocode(latitude, longitude)

    async def searchPlacesByTags(
        self,
        latitude: float,
        longitude: float,
        categories: Iterable[str],
        radiusKm: float = 10,
        limit: int = 50,
    ) -> List[PlaceSearchResult]:
        """Category search on Geoapify, without fallback, dood!

        Raises:
            ConfigurationError: If Geoapify is not configured
            PlaceSearchError: If the request failed
        """
        if self.geoapifyClient is None:
            logger.error("Category search requested but Geoapify client is not configured")
            raise ConfigurationError("Geoapify API key is not configured")
        return await self.geoapifyClient.searchPlacesByCategories(
            latitude, longitude, categories, radiusKm=radiusKm, limit=limit
        )

    async def searchPlacesNearby(
        self,
        latitude: float,
        longitude: float,
        query: str,
        radiusKm: float = 10,
        limit: int = 20,
    ) -> List[PlaceSearchResult]:
        """Free-text search on Nominatim, without fallback.

        Raises:
            PlaceSearchError: If the request failed
        """
        return await self.nominatimClient.searchPlacesNearby(latitude, longitude, query, radiusKm=radiusKm, limit=limit)

    async def searchNearby(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        """Proximity search over all places providers with fallback.

        Raises:
            GeoError: If every eligible provider failed
            ConfigurationError: If no provider can serve the request
        """
        return await self.proximitySearch.search(request)

    async def findNearbyByServiceType(
        self,
        latitude: float,
        longitude: float,
        serviceType: str,
        radiusKm: float = 10,
        limit: int = 50,
    ) -> List[PlaceSearchResult]:
        """Find places offering a service type (grooming, veterinary, shop, ...), dood!

        Never raises on provider failures: an unknown service type or a
        failed provider chain both yield an empty list.
        """
        categories = getCategoriesForServiceType(serviceType)
        if not categories:
            logger.warning(f"No categories mapped for service type: {serviceType}")
            return []

        logger.info(f"Searching {serviceType} near ({latitude}, {longitude}) within {radiusKm}km")
        request = PlaceSearchRequest(
            latitude=latitude,
            longitude=longitude,
            categories=frozenset(categories),
            query=getSearchQueryForServiceType(serviceType),
            radiusKm=radiusKm,
            limit=limit,
        )

        try:
            places = await self.proximitySearch.search(request)
        except GeoError as e:
            logger.error(f"Error searching places for service type {serviceType}: {e}")
            return []

        logger.info(f"Found {len(places)} places for service type {serviceType}")
        return places

    async def findClosestByServiceType(
        self,
        latitude: float,
        longitude: float,
        serviceType: str,
        radiusKm: float = 10,
    ) -> Optional[PlaceSearchResult]:
        """Closest place offering a service type, None if nothing was found."""
        places = await self.findNearbyByServiceType(latitude, longitude, serviceType, radiusKm=radiusKm)
        return places[0] if places else None

    def calculateDistance(self, lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        return distanceKm(lat1, lon1, lat2, lon2)

    def clearCache(self) -> None:
        self.nominatimClient.clearCache()

    def getCacheSize(self) -> int:
        return self.nominatimClient.getCacheSize()

    async def destroy(self) -> None:
        """Release rate limiter state, call on shutdown."""
        if self.rateLimiterManager is not None:
            await self.rateLimiterManager.destroy()
        logger.info("GeocodingService destroyed, dood!")
