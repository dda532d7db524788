"""
Proximity search with provider fallback, dood!

ProximitySearch walks an ordered list of places providers and returns the
first non-empty answer. Provider failures are logged and trigger fallback
to the next provider; results are never merged across providers.
"""

import logging
import math
from dataclasses import replace
from typing import Dict, List, Optional

from geoscout.distance import distanceKm
from geoscout.exceptions import ConfigurationError, GeoError
from geoscout.models import PlaceSearchRequest, PlaceSearchResult
from geoscout.providers.interface import PlacesProviderInterface

logger = logging.getLogger(__name__)

# Slack for rounding of provider-computed distances
RADIUS_TOLERANCE_KM = 0.01


class ProximitySearch:
    """Ordered fallback chain of places providers.

    Example:
        >>> search = ProximitySearch([geoapifyClient, nominatimClient])
        >>> request = PlaceSearchRequest(
        ...     latitude=40.7128, longitude=-74.0060, categories={"pet.veterinary"}, query="veterinary clinic"
        ... )
        >>> places = await search.search(request)
    """

    def __init__(self, providers: List[PlacesProviderInterface]):
        self._providers: List[PlacesProviderInterface] = list(providers)

    def listProviders(self) -> List[str]:
        return [provider.name for provider in self._providers]

    def _orderedProviders(self, request: PlaceSearchRequest) -> List[PlacesProviderInterface]:
        """Providers to try for the request, in priority order."""
        if request.providerOrder is None:
            return list(self._providers)

        byName: Dict[str, PlacesProviderInterface] = {provider.name: provider for provider in self._providers}
        ordered: List[PlacesProviderInterface] = []
        for providerName in request.providerOrder:
            provider = byName.get(providerName)
            if provider is None:
                logger.warning(f"Unknown places provider '{providerName}' in providerOrder, ignoring, dood!")
                continue
            if provider not in ordered:
                ordered.append(provider)
        return ordered

    async def search(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        """Find places near the request center, dood!

        Providers that are unavailable or do not support the request are
        skipped. A provider raising GeoError is logged and the next one is
        tried.

        Returns:
            Places within request.radiusKm, sorted by ascending distance,
            at most request.limit entries. Empty list if a provider answered
            but nothing was found.

        Raises:
            GeoError: The last provider error, if every eligible provider failed
            ConfigurationError: If no provider was eligible for the request
        """
        lastError: Optional[GeoError] = None
        anySucceeded = False

        for provider in self._orderedProviders(request):
            if not provider.isAvailable():
                logger.debug(f"Places provider '{provider.name}' is not available, skipping")
                continue
            if not provider.supports(request):
                logger.debug(f"Places provider '{provider.name}' does not support the request, skipping")
                continue

            try:
                places = await provider.searchPlaces(request)
            except GeoError as e:
                logger.warning(f"Places provider '{provider.name}' failed: {e}, trying next provider")
                lastError = e
                continue

            anySucceeded = True
            validated = self._validate(places, request)
            if validated:
                logger.debug(f"Places provider '{provider.name}' returned {len(validated)} places")
                return validated
            logger.debug(f"Places provider '{provider.name}' found nothing, trying next provider")

        if anySucceeded:
            return []
        if lastError is None:
            logger.error("No places provider is available for the request")
            raise ConfigurationError(
                "No places provider is available for the request",
                query=request.query or ",".join(sorted(request.categories)) or None,
            )

        logger.error(f"All places providers failed, last error: {lastError}")
        raise lastError

    @staticmethod
    def _validate(places: List[PlaceSearchResult], request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        """Recompute distances from the request center, drop out-of-radius
        entries, sort by distance and trim to the limit."""
        validated: List[PlaceSearchResult] = []
        for place in places:
            if not (math.isfinite(place.latitude) and math.isfinite(place.longitude)):
                logger.debug(f"Dropping place {place.placeId} with non-finite coordinates")
                continue
            distance = distanceKm(request.latitude, request.longitude, place.latitude, place.longitude)
            if distance > request.radiusKm + RADIUS_TOLERANCE_KM:
                continue
            if distance != place.distanceKm:
                place = replace(place, distanceKm=distance)
            validated.append(place)

        validated.sort(key=lambda place: place.distanceKm)
        return validated[: request.limit]
