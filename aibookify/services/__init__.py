"""
Services Package

Third-party API clients:
- places_client: Geoapify geocoding and hotel lookup
- image_client: Pexels hotel photos
- external_hotels: Hotel results assembled from both
"""

from .places_client import PlacesClient
from .image_client import ImageClient, build_image_query
from .external_hotels import ExternalHotelSearch

__all__ = [
    "PlacesClient",
    "ImageClient",
    "build_image_query",
    "ExternalHotelSearch"
]
