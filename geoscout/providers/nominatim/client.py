"""
Nominatim API Async Client

This module provides the NominatimClient class for the OpenStreetMap
Nominatim service: forward geocoding, reverse geocoding and free-text
search of places near a point. The public instance allows at most one
request per second, so every request goes through the rate limiter.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from geoscout.cache import AddressKeyGenerator, CacheInterface, DictCache, buildFullAddress
from geoscout.distance import boundingBox, distanceKm
from geoscout.exceptions import GeocodeError, MalformedResponseError, PlaceSearchError, ReverseGeocodeError
from geoscout.models import (
    GeocodeResult,
    PlaceAddress,
    PlaceSearchRequest,
    PlaceSearchResult,
    ReverseGeocodeResult,
)
from geoscout.providers.interface import GeocoderInterface, PlacesProviderInterface
from geoscout.rate_limiter import IntervalConfig, MinIntervalRateLimiter, RateLimiterManager

logger = logging.getLogger(__name__)


def _statusCodeOf(error: Exception) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


class NominatimClient(PlacesProviderInterface, GeocoderInterface):
    """Async client for Nominatim with caching and rate limiting, dood!

    Creates new HTTP session for each request to support proper
    concurrent operations. Geocoding results are cached by normalized
    address; reverse geocoding and place searches are never cached.

    Example:
        >>> client = NominatimClient(userAgent="my-app/1.0 (me@example.com)")
        >>>
        >>> # Forward geocoding
        >>> result = await client.geocode("123 Main St", city="Springfield")
        >>>
        >>> # Reverse geocoding
        >>> location = await client.reverseGeocode(40.7128, -74.0060)
        >>>
        >>> # Places near a point
        >>> places = await client.searchPlacesNearby(40.7128, -74.0060, "veterinary clinic", radiusKm=5)
    """

    API_BASE_URL = "https://nominatim.openstreetmap.org"
    DEFAULT_USER_AGENT = "geoscout/0.1 (geocoding and places lookup)"
    # Nominatim refuses to return more than 40 results per search
    MAX_RESULTS = 40

    def __init__(
        self,
        baseUrl: Optional[str] = None,
        userAgent: Optional[str] = None,
        requestTimeout: float = 10,
        cache: Optional[CacheInterface[str, GeocodeResult]] = None,
        rateLimiter: Optional[RateLimiterManager] = None,
        rateLimiterQueue: str = "nominatim",
        minIntervalSeconds: float = 1.0,
        acceptLanguage: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Nominatim client, dood!

        Args:
            baseUrl: Nominatim server URL (default: public OSM instance)
            userAgent: User-Agent header, required by the Nominatim usage policy
            requestTimeout: HTTP request timeout in seconds (default: 10)
            cache: Cache for geocoding results (default: in-memory DictCache)
            rateLimiter: Shared rate limiter manager (default: private manager
                enforcing minIntervalSeconds on rateLimiterQueue)
            rateLimiterQueue: Rate limiter queue name (default: "nominatim")
            minIntervalSeconds: Interval for the default rate limiter (default: 1.0)
            acceptLanguage: Optional language for results (e.g., "en", "de")
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.baseUrl = (baseUrl or self.API_BASE_URL).rstrip("/")
        self.userAgent = userAgent or self.DEFAULT_USER_AGENT
        self.requestTimeout = requestTimeout
        self.cache: CacheInterface[str, GeocodeResult] = (
            cache if cache is not None else DictCache(keyGenerator=AddressKeyGenerator())
        )
        self.rateLimiterQueue = rateLimiterQueue
        self._rateLimiter = (
            rateLimiter
            if rateLimiter is not None
            else RateLimiterManager.forQueue(
                rateLimiterQueue, MinIntervalRateLimiter(IntervalConfig(minIntervalSeconds=minIntervalSeconds))
            )
        )
        self.acceptLanguage = acceptLanguage
        self._transport = transport

    @property
    def name(self) -> str:
        return "nominatim"

    def isAvailable(self) -> bool:
        return True

    def supports(self, request: PlaceSearchRequest) -> bool:
        return bool((request.query and request.query.strip()) or request.categories)

    async def geocode(
        self,
        address: str,
        city: Optional[str] = None,
        state: Optional[str] = None,
        postalCode: Optional[str] = None,
    ) -> GeocodeResult:
        """Forward geocoding: convert address to coordinates, dood!

        Checks the cache first; a cache hit skips both rate limiting and
        the network call.

        Args:
            address: Street address (or any free-form address string)
            city: Optional city name
            state: Optional state/province
            postalCode: Optional postal code

        Returns:
            Coordinates and display name of the best match

        Raises:
            GeocodeError: No results, or the request failed (network,
                timeout, non-2xx). The message contains the full address.
            MalformedResponseError: Unexpected payload shape
        """
        fullAddress = buildFullAddress(address, city, state, postalCode)

        cachedResult = await self.cache.get(fullAddress)
        if cachedResult is not None:
            logger.debug(f"Cache hit for address: {fullAddress}")
            return cachedResult

        params: Dict[str, Any] = {
            "q": fullAddress,
            "format": "json",
            "limit": 1,
            "addressdetails": 1,
        }

        try:
            data = await self._makeRequest("search", params)
        except httpx.HTTPError as e:
            logger.error(f"Error geocoding address: {fullAddress}: {e}")
            raise GeocodeError(
                f"Geocoding failed for address: {fullAddress}",
                query=fullAddress,
                statusCode=_statusCodeOf(e),
            ) from e
        except MalformedResponseError as e:
            raise MalformedResponseError(
                f"Invalid geocoding response for address: {fullAddress}", query=fullAddress
            ) from e

        if not isinstance(data, list):
            logger.error(f"Unexpected geocoding payload for address {fullAddress}: {type(data).__name__}")
            raise MalformedResponseError(
                f"Unexpected geocoding response for address: {fullAddress}", query=fullAddress
            )

        if not data:
            logger.warning(f"No geocoding results found for address: {fullAddress}")
            raise GeocodeError(f"Could not geocode address: {fullAddress}", query=fullAddress)

        first = data[0]
        try:
            lat = float(first["lat"])
            lon = float(first["lon"])
            if not (math.isfinite(lat) and math.isfinite(lon)):
                raise ValueError(f"Non-finite coordinates: {lat}, {lon}")
            result = GeocodeResult(latitude=lat, longitude=lon, displayName=first.get("display_name"))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unparseable geocoding result for address {fullAddress}: {first!r}")
            raise MalformedResponseError(
                f"Unexpected geocoding response for address: {fullAddress}", query=fullAddress
            ) from e

        # First stored value wins, so concurrent misses still agree on one result
        existing = await self.cache.get(fullAddress)
        if existing is not None:
            return existing
        await self.cache.set(fullAddress, result)

        logger.debug(f"Geocoded address: {fullAddress} -> {result.latitude}, {result.longitude}")
        return result

    async def reverseGeocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Reverse geocoding: convert coordinates to address, dood!

        Args:
            latitude: Latitude (-90 to 90)
            longitude: Longitude (-180 to 180)

        Returns:
            Raw address block and display name

        Raises:
            ReverseGeocodeError: No address found or the request failed
            MalformedResponseError: Unexpected payload shape
        """
        coordinates = f"{latitude}, {longitude}"
        params: Dict[str, Any] = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
        }

        try:
            data = await self._makeRequest("reverse", params)
        except httpx.HTTPError as e:
            logger.error(f"Error reverse geocoding coordinates: {coordinates}: {e}")
            raise ReverseGeocodeError(
                f"Reverse geocoding failed for coordinates: {coordinates}",
                query=coordinates,
                statusCode=_statusCodeOf(e),
            ) from e
        except MalformedResponseError as e:
            raise MalformedResponseError(
                f"Invalid reverse geocoding response for coordinates: {coordinates}", query=coordinates
            ) from e

        if not isinstance(data, dict):
            logger.error(f"Unexpected reverse geocoding payload for {coordinates}: {type(data).__name__}")
            raise MalformedResponseError(
                f"Unexpected reverse geocoding response for coordinates: {coordinates}", query=coordinates
            )

        displayName = data.get("display_name")
        if not displayName:
            logger.warning(f"No reverse geocoding result for {coordinates}: {data.get('error', 'no display_name')}")
            raise ReverseGeocodeError(f"Could not reverse geocode coordinates: {coordinates}", query=coordinates)

        address = data.get("address")
        result = ReverseGeocodeResult(
            address=dict(address) if isinstance(address, dict) else {},
            displayName=displayName,
        )
        logger.debug(f"Reverse geocoded: {coordinates} -> {result.displayName}")
        return result

    async def searchPlacesNearby(
        self,
        latitude: float,
        longitude: float,
        query: str,
        radiusKm: float = 10,
        limit: int = 20,
    ) -> List[PlaceSearchResult]:
        """Free-text search for places near a point, dood!

        The search is biased toward a box around the point, but the box is
        not a hard filter: every candidate is measured and the ones further
        than radiusKm are dropped here.

        Args:
            latitude: Center latitude
            longitude: Center longitude
            query: Free-form search text (e.g. "veterinary clinic")
            radiusKm: Search radius in kilometers (default: 10)
            limit: Maximum number of results (default: 20)

        Returns:
            Places sorted by ascending distance; empty list if the provider
            returned no data or malformed data

        Raises:
            PlaceSearchError: If the request failed
        """
        query = query.strip()
        minLon, minLat, maxLon, maxLat = boundingBox(latitude, longitude, radiusKm)
        params: Dict[str, Any] = {
            "q": query,
            "format": "json",
            "addressdetails": 1,
            "limit": min(limit, self.MAX_RESULTS),
            "viewbox": f"{minLon},{minLat},{maxLon},{maxLat}",
            "bounded": 0,
        }

        try:
            data = await self._makeRequest("search", params)
        except httpx.HTTPError as e:
            logger.error(f"Error searching places for query '{query}': {e}")
            raise PlaceSearchError(
                f"Place search failed for query: {query}",
                query=query,
                statusCode=_statusCodeOf(e),
            ) from e
        except MalformedResponseError:
            logger.warning(f"Invalid place search response for query '{query}', returning no places")
            return []

        if not data or not isinstance(data, list):
            logger.debug(f"No places found for query '{query}'")
            return []

        results: List[PlaceSearchResult] = []
        for item in data:
            place = self._parsePlace(item, latitude, longitude)
            if place is None:
                continue
            if place.distanceKm > radiusKm:
                continue
            results.append(place)

        results.sort(key=lambda place: place.distanceKm)
        logger.debug(
            f"Nominatim search '{query}' near ({latitude}, {longitude}) within {radiusKm}km: "
            f"{len(data)} candidates, {len(results)} in radius"
        )
        return results[:limit]

    async def searchPlaces(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        """Run a nearby text search for a proximity request.

        Without an explicit query the categories are turned into search
        text (e.g. "pet.veterinary" -> "veterinary").
        """
        query = request.query
        if not query or not query.strip():
            query = " ".join(sorted(category.split(".")[-1].replace("_", " ") for category in request.categories))
        return await self.searchPlacesNearby(
            request.latitude, request.longitude, query, radiusKm=request.radiusKm, limit=request.limit
        )

    def clearCache(self) -> None:
        self.cache.clear()
        logger.debug("Geocoding cache cleared")

    def getCacheSize(self) -> int:
        return self.cache.size()

    def _parsePlace(self, item: Any, centerLat: float, centerLon: float) -> Optional[PlaceSearchResult]:
        """Map one /search entry to a PlaceSearchResult, None if unusable."""
        if not isinstance(item, dict):
            return None

        try:
            lat = float(item["lat"])
            lon = float(item["lon"])
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Skipping search result without valid coordinates: {item.get('place_id')}")
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            logger.debug(f"Skipping search result with non-finite coordinates: {item.get('place_id')}")
            return None

        displayName = item.get("display_name") or ""
        name = item.get("name") or displayName.split(",")[0].strip() or "Unknown"

        address: Optional[PlaceAddress] = None
        rawAddress = item.get("address")
        if isinstance(rawAddress, dict):
            address = PlaceAddress(
                road=rawAddress.get("road"),
                houseNumber=rawAddress.get("house_number"),
                city=(
                    rawAddress.get("city")
                    or rawAddress.get("town")
                    or rawAddress.get("village")
                    or rawAddress.get("hamlet")
                ),
                state=rawAddress.get("state"),
                postcode=rawAddress.get("postcode"),
                country=rawAddress.get("country"),
            )
            if address.isEmpty():
                address = None

        placeId = item.get("place_id")
        return PlaceSearchResult(
            placeId=str(placeId) if placeId is not None else f"osm_{lat}_{lon}",
            name=name,
            latitude=lat,
            longitude=lon,
            displayName=displayName,
            address=address,
            type=item.get("type"),
            category=item.get("class") or item.get("category"),
            distanceKm=distanceKm(centerLat, centerLon, lat, lon),
            provider=self.name,
        )

    async def _makeRequest(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Make HTTP request to Nominatim, dood!

        Single point for all HTTP requests with rate limiting. Creates new
        session per request.

        Args:
            endpoint: API endpoint path ("search" or "reverse")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            httpx.HTTPError: Network error, timeout or non-2xx status
            MalformedResponseError: Response body is not valid JSON
        """
        url = f"{self.baseUrl}/{endpoint}"
        if self.acceptLanguage and "accept-language" not in params:
            params["accept-language"] = self.acceptLanguage

        logger.debug(f"Making request to {url} with params: {params}")

        await self._rateLimiter.applyLimit(self.rateLimiterQueue)

        async with httpx.AsyncClient(
            timeout=self.requestTimeout,
            headers={"User-Agent": self.userAgent},
            transport=self._transport,
        ) as session:
            response = await session.get(url, params=params)
            if not response.is_success:
                logger.error(f"Nominatim request failed: {response.status_code}")
            response.raise_for_status()

            try:
                return response.json()
            except ValueError as e:
                # JSONDecodeError and UnicodeDecodeError for non UTF-8 bodies
                logger.error(f"Failed to parse JSON response from {url}: {e}")
                raise MalformedResponseError(f"Invalid JSON from {url}") from e
