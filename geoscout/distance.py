"""
Great-circle distance helpers.

Distances are rounded to 2 decimal places so that repeated calls on identical
input are bit-for-bit identical and radius comparisons are stable.
"""

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180.0


def toRadians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def distanceKm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two coordinates using the haversine formula, dood!

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers, rounded to 2 decimal places

    Raises:
        ValueError: If any coordinate is NaN or infinite

    Example:
        >>> distanceKm(0.0, 0.0, 0.0, 1.0)
        111.19
    """
    if not all(math.isfinite(value) for value in (lat1, lon1, lat2, lon2)):
        raise ValueError(f"Coordinates must be finite numbers: {(lat1, lon1, lat2, lon2)}")

    dLat = toRadians(lat2 - lat1)
    dLon = toRadians(lon2 - lon1)

    a = math.sin(dLat / 2) * math.sin(dLat / 2) + math.cos(toRadians(lat1)) * math.cos(
        toRadians(lat2)
    ) * math.sin(dLon / 2) * math.sin(dLon / 2)
    # Clamp float noise so sqrt(1 - a) never sees a negative number
    a = min(1.0, max(0.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


def boundingBox(latitude: float, longitude: float, radiusKm: float) -> Tuple[float, float, float, float]:
    """Approximate box around a point covering radiusKm in every direction.

    Only meant as a search bias for providers, never as a filter.

    Returns:
        (minLon, minLat, maxLon, maxLat) clamped to valid coordinate ranges
    """
    latDelta = radiusKm / KM_PER_DEGREE
    cosLat = max(math.cos(toRadians(latitude)), 1e-6)
    lonDelta = min(radiusKm / (KM_PER_DEGREE * cosLat), 180.0)

    return (
        max(longitude - lonDelta, -180.0),
        max(latitude - latDelta, -90.0),
        min(longitude + lonDelta, 180.0),
        min(latitude + latDelta, 90.0),
    )
