"""
Geoscout Exceptions

This module contains the exception hierarchy used by geocoding and places
providers. Every error carries the original query so callers can log it.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GeoError(Exception):
    """Base exception class for all geoscout errors, dood!

    Attributes:
        message: Human-readable error message (includes the query)
        query: Original address, coordinates or search text (if available)
        statusCode: HTTP status code of the failed upstream call (if available)
        responseBody: Raw upstream response text (if available)
    """

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        statusCode: Optional[int] = None,
        responseBody: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.query = query
        self.statusCode = statusCode
        self.responseBody = responseBody
        logger.debug(f"{type(self).__name__}: {message} (status: {statusCode})")

    def __str__(self) -> str:
        return self.message


class ConfigurationError(GeoError):
    """Raised when a required credential or setting is missing.

    Fatal to the operation that needs it, never to the process.
    """


class GeocodeError(GeoError):
    """Raised when an address cannot be turned into coordinates."""


class ReverseGeocodeError(GeoError):
    """Raised when coordinates cannot be turned into an address."""


class PlaceSearchError(GeoError):
    """Raised when a places search request fails."""


class MalformedResponseError(GeoError):
    """Raised when a provider payload does not have the expected shape.

    Proximity searches degrade to an empty result instead of raising this.
    """
