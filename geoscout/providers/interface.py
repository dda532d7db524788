from abc import ABC, abstractmethod
from typing import List, Optional

from geoscout.models import GeocodeResult, PlaceSearchRequest, PlaceSearchResult, ReverseGeocodeResult


class PlacesProviderInterface(ABC):
    """
    Capability shared by every provider able to find places near a point.

    ProximitySearch only depends on this interface and keeps an ordered list
    of implementations to try.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name, used in logs and in PlaceSearchResult.provider"""
        pass

    @abstractmethod
    def isAvailable(self) -> bool:
        """
        Whether the provider is configured well enough to be queried
        (e.g. has its API key).
        """
        pass

    @abstractmethod
    def supports(self, request: PlaceSearchRequest) -> bool:
        """
        Whether the provider can serve the request (e.g. category providers
        need at least one category).
        """
        pass

    @abstractmethod
    async def searchPlaces(self, request: PlaceSearchRequest) -> List[PlaceSearchResult]:
        """
        Find places within request.radiusKm of the request center.

        Returns:
            Places sorted by ascending distance, at most request.limit entries.
            Empty list when the provider has no usable data.

        Raises:
            PlaceSearchError: If the upstream request fails
            ConfigurationError: If the provider is not configured
        """
        pass


class GeocoderInterface(ABC):
    """
    Capability of providers able to geocode addresses and coordinates.
    """

    @abstractmethod
    async def geocode(
        self,
        address: str,
        city: Optional[str] = None,
        state: Optional[str] = None,
        postalCode: Optional[str] = None,
    ) -> GeocodeResult:
        """
        Convert an address into coordinates.

        Raises:
            GeocodeError: If nothing was found or the request failed
            MalformedResponseError: If the provider payload has an unexpected shape
        """
        pass

    @abstractmethod
    async def reverseGeocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """
        Convert coordinates into an address.

        Raises:
            ReverseGeocodeError: If nothing was found or the request failed
            MalformedResponseError: If the provider payload has an unexpected shape
        """
        pass
