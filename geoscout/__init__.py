"""
geoscout - geocoding, reverse geocoding and nearby places lookup, dood!

Main entry point is geoscout.service.GeocodingService.
"""

__version__ = "0.1.0"
