# services/external_hotels.py
"""
External Hotel Search
Hotels the platform does not list itself, found through Geoapify and
illustrated with Pexels photos. Used when the database has no match.
"""

import asyncio
from typing import Any, Dict, List, Optional

from loguru import logger

from ..algorithms import dedupe_hotels, rank_hotels
from ..config import settings
from ..exceptions import PlacesError
from ..schemas import QueryAnalysis
from .image_client import ImageClient
from .places_client import PlacesClient


class ExternalHotelSearch:

    def __init__(self, places: Optional[PlacesClient] = None, images: Optional[ImageClient] = None):
        self.places = places or PlacesClient()
        self.images = images or ImageClient()

    async def search(self, analysis: QueryAnalysis, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Ranked hotel results for the analysis' location.

        Returns:
            list: Hotel result dicts with source "geoapify"; [] when places is
            not configured, fails, or finds nothing
        """
        entities = analysis.entities
        location = entities.location
        if not location:
            return []
        if not self.places.configured:
            logger.debug("Geoapify not configured, skipping external search")
            return []

        try:
            places = await self.places.find_hotels(location)
        except PlacesError as e:
            logger.warning(f"External hotel search failed for {location!r}: {e}")
            return []

        candidates = [p for p in places if p.get("name")][:limit]
        if not candidates:
            return []

        details = await asyncio.gather(*(self._details(p["id"]) for p in candidates))

        hotels = []
        for place, detail in zip(candidates, details):
            detail = detail or {}
            name = detail.get("name") or place["name"]
            hotels.append({
                "id": f"geoapify_{place['id']}",
                "name": name,
                "description": f"{name} in {location}",
                "location": detail.get("location") or place.get("location") or location,
                "price": 0,
                "amenities": detail.get("amenities") or [],
                "images": [],
                "rating": detail.get("rating") or 4.0,
                "source": "geoapify",
                "phone": detail.get("phone"),
                "website": detail.get("website"),
            })

        hotels = dedupe_hotels(hotels)

        photo_sets = await asyncio.gather(
            *(self.images.search_hotel_images(h["name"], location) for h in hotels)
        )
        for hotel, photos in zip(hotels, photo_sets):
            hotel["images"] = photos or [settings.PLACEHOLDER_IMAGE_URL]

        ranked = rank_hotels(hotels, entities.amenities, entities.hotel_name, entities.budget)
        logger.info(f"External search found {len(ranked)} hotels near {location!r}")
        return ranked

    async def _details(self, place_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.places.get_hotel_details(place_id)
        except PlacesError as e:
            logger.warning(f"Geoapify details failed for {place_id}: {e}")
            return None
