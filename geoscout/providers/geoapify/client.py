"""
Geoapify Places API Async Client

This module provides the GeoapifyPlacesClient class for the paid,
category-based Geoapify Places API. Geoapify throttles on its side, so the
client uses a no-op rate limiter unless told otherwise.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

import httpx

from geoscout.distance import distanceKm
from geoscout.exceptions import ConfigurationError, MalformedResponseError, PlaceSearchError
from geoscout.models import PlaceAddress, PlaceSearchRequest, PlaceSearchResult
from geoscout.providers.interface import PlacesProviderInterface
from geoscout.rate_limiter import NullRateLimiter, RateLimiterManager

logger = logging.getLogger(__name__)


class GeoapifyPlacesClient(PlacesProviderInterface):
    """Async client for Geoapify Places API, dood!

    Example:
        >>> client = GeoapifyPlacesClient(apiKey="your_api_key")
        >>> places = await client.searchPlacesByCategories(
        ...     40.7128, -74.0060, {"pet.veterinary"}, radiusKm=10, limit=20
        ... )
    """

    API_BASE_URL = "https://api.geoapify.com"
    # Hard cap of the provider
    MAX_RESULTS = 100

    def __init__(
        self,
        apiKey: Optional[str],
        baseUrl: Optional[str] = None,
        requestTimeout: float = 30,
        rateLimiter: Optional[RateLimiterManager] = None,
        rateLimiterQueue: str = "geoapify",
        acceptLanguage: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Geoapify client, dood!

        Args:
            apiKey: Geoapify API key. Without it every search raises
                ConfigurationError and isAvailable() is False.
            baseUrl: API server URL (default: https://api.geoapify.com)
            requestTimeout: HTTP request timeout in seconds (default: 30)
            rateLimiter: Shared rate limiter manager (default: no-op limiter)
            rateLimiterQueue: Rate limiter queue name (default: "geoapify")
            acceptLanguage: Optional language for results (e.g., "en", "de")
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.apiKey = apiKey or None
        self.baseUrl = (baseUrl or self.API_BASE_URL).rstrip("/")
        self.requestTimeout = requestTimeout
        self.rateLimiterQueue = rateLimiterQueue
        self._rateLimiter = (
            rateLimiter if rateLimiter is not None else RateLimiterManager.forQueue(rateLimiterQueue, NullRateLimiter())
        )
        self.acceptLanguage = acceptLanguage
        self._transport = transport

    @property
    def name(self) -> str:
        return "geoapify"

    def isAvailable(self) -> bool:
        return bool(self.apiKey)

    def supports(self, request: PlaceSearchRequest) -> bool:
        return bool(request.categories)

    async def searchPlaces(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        return await self.searchPlacesByCategories(
            request.latitude,
            request.longitude,
            request.categories,
            radiusKm=request.radiusKm,
            limit=request.limit,
        )

    async def searchPlacesByCategories(
        self,
        latitude: float,
        longitude: float,
        categories: Iterable[str],
        radiusKm: float = 10,
        limit: int = 50,
    ) -> List[PlaceSearchResult]:
        """Find places of the given categories within a circle, dood!

        Args:
            latitude: Center latitude
            longitude: Center longitude
            categories: Geoapify categories (e.g. {"pet.veterinary", "pet.shop"}),
                a single category string is also accepted
            radiusKm: Search radius in kilometers (default: 10)
            limit: Maximum number of results (default: 50, provider cap: 100)

        Returns:
            Places sorted by ascending distance; empty list if the response
            has no usable features

        Raises:
            ConfigurationError: If no API key is configured
            ValueError: If no categories are given
            PlaceSearchError: If the request failed
        """
        if not self.apiKey:
            logger.error("Geoapify API key is not configured")
            raise ConfigurationError("Geoapify API key is not configured")

        if isinstance(categories, str):
            categories = [categories]
        categoryList = sorted({category.strip() for category in categories if category and category.strip()})
        if not categoryList:
            raise ValueError("At least one category is required")
        categoriesParam = ",".join(categoryList)

        radiusMeters = int(round(radiusKm * 1000))
        params: Dict[str, Any] = {
            "categories": categoriesParam,
            "filter": f"circle:{longitude},{latitude},{radiusMeters}",
            "bias": f"proximity:{longitude},{latitude}",
            "limit": min(limit, self.MAX_RESULTS),
        }

        try:
            data = await self._makeRequest("v2/places", params)
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Geoapify places request failed for categories {categoriesParam}: "
                f"status {e.response.status_code}, body: {e.response.text}"
            )
            raise PlaceSearchError(
                f"Place search failed for categories: {categoriesParam}",
                query=categoriesParam,
                statusCode=e.response.status_code,
                responseBody=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Geoapify places request failed for categories {categoriesParam}: {e}")
            raise PlaceSearchError(
                f"Place search failed for categories: {categoriesParam}", query=categoriesParam
            ) from e
        except MalformedResponseError:
            logger.warning(f"Invalid Geoapify response for categories {categoriesParam}, returning no places")
            return []

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            logger.warning(f"Invalid Geoapify response shape for categories {categoriesParam}")
            return []

        results: List[PlaceSearchResult] = []
        for feature in features:
            if len(results) >= limit:
                break
            place = self._parseFeature(feature, latitude, longitude, categoryList)
            if place is None:
                continue
            if place.distanceKm > radiusKm:
                continue
            results.append(place)

        results.sort(key=lambda place: place.distanceKm)
        logger.debug(
            f"Geoapify search {categoriesParam} near ({latitude}, {longitude}) within {radiusKm}km: "
            f"{len(features)} features, {len(results)} in radius"
        )
        return results

    def _parseFeature(
        self,
        feature: Any,
        centerLat: float,
        centerLon: float,
        requestedCategories: List[str],
    ) -> Optional[PlaceSearchResult]:
        """Map one feature to a PlaceSearchResult, None without valid geometry."""
        if not isinstance(feature, dict):
            return None

        geometry = feature.get("geometry")
        coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
        if not isinstance(coordinates, list) or len(coordinates) < 2:
            return None
        try:
            lon = float(coordinates[0])
            lat = float(coordinates[1])
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}

        internationalNames = properties.get("name_international")
        name = (
            properties.get("name")
            or (internationalNames.get("en") if isinstance(internationalNames, dict) else None)
            or properties.get("address_line1")
            or "Unknown"
        )

        address = PlaceAddress(
            road=properties.get("street"),
            houseNumber=properties.get("housenumber"),
            city=properties.get("city"),
            state=properties.get("state"),
            postcode=properties.get("postcode"),
            country=properties.get("country"),
        )

        addressLines = [line for line in (properties.get("address_line1"), properties.get("address_line2")) if line]
        displayName = properties.get("formatted") or ", ".join(addressLines) or name

        placeId = properties.get("place_id") or feature.get("id") or f"geoapify_{lat}_{lon}"
        category = self._pickCategory(properties.get("categories"), requestedCategories)

        return PlaceSearchResult(
            placeId=str(placeId),
            name=name,
            latitude=lat,
            longitude=lon,
            displayName=displayName,
            address=None if address.isEmpty() else address,
            type=category.split(".")[-1] if category else None,
            category=category,
            distanceKm=distanceKm(centerLat, centerLon, lat, lon),
            provider=self.name,
        )

    @staticmethod
    def _pickCategory(featureCategories: Any, requestedCategories: List[str]) -> Optional[str]:
        """Most specific feature category matching one of the requested ones."""
        if not isinstance(featureCategories, list) or not featureCategories:
            return None

        matching = [
            category
            for category in featureCategories
            if isinstance(category, str)
            and any(category == requested or category.startswith(requested + ".") for requested in requestedCategories)
        ]
        if matching:
            return max(matching, key=lambda category: category.count("."))
        first = featureCategories[0]
        return first if isinstance(first, str) else None

    async def _makeRequest(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Make HTTP request to Geoapify, dood!

        Raises:
            httpx.HTTPError: Network error, timeout or non-2xx status
            MalformedResponseError: Response body is not valid JSON
        """
        url = f"{self.baseUrl}/{endpoint}"
        logger.debug(f"Making request to {url} with params: {params}")

        params["apiKey"] = self.apiKey
        if self.acceptLanguage and "lang" not in params:
            params["lang"] = self.acceptLanguage

        await self._rateLimiter.applyLimit(self.rateLimiterQueue)

        async with httpx.AsyncClient(timeout=self.requestTimeout, transport=self._transport) as session:
            response = await session.get(url, params=params)
            response.raise_for_status()

            try:
                return response.json()
            except ValueError as e:
                # JSONDecodeError and UnicodeDecodeError for non UTF-8 bodies
                logger.error(f"Failed to parse JSON response from {url}: {e}")
                raise MalformedResponseError(f"Invalid JSON from {url}") from e
