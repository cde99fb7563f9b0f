# services/image_client.py
"""
Pexels Image Client
Finds representative photos for hotels that have none.
Never raises: any failure yields an empty list.
"""

import re
from typing import List, Optional

import httpx
from loguru import logger

from ..config import configured_key, settings


GENERIC_WORDS = re.compile(r"\b(hotel|resort|inn|suites|lodge|villa|boutique)\b", re.IGNORECASE)
GENERIC_QUERY = "luxury hotel room"
FALLBACK_QUERY = "hotel room interior"
PHOTOS_PER_HOTEL = 3


def build_image_query(hotel_name: str, location: Optional[str] = None) -> str:
    """'Sarova Stanley Hotel', 'Nairobi' -> 'Sarova Stanley hotel Nairobi'"""
    cleaned = " ".join(GENERIC_WORDS.sub("", hotel_name or "").split())
    if len(cleaned) < 3 or cleaned.isdigit():
        return GENERIC_QUERY
    return f"{cleaned} hotel {location or ''}".strip()


class ImageClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = configured_key(api_key) if api_key is not None else settings.pexels_key
        self.base_url = (base_url or settings.PEXELS_BASE_URL).rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _photos(self, client: httpx.AsyncClient, path: str, params: dict) -> List[str]:
        response = await client.get(
            f"{self.base_url}{path}",
            params=params,
            headers={"Authorization": self.api_key}
        )
        response.raise_for_status()
        photos = response.json().get("photos") or []
        return [p["src"]["large"] for p in photos if (p.get("src") or {}).get("large")]

    async def search_hotel_images(self, hotel_name: str, location: Optional[str] = None) -> List[str]:
        """
        Up to 3 landscape photo URLs for a hotel.
        Retries once with a generic interior query when nothing matches.
        """
        if not self.configured:
            logger.warning("Pexels API key not configured, skipping image search")
            return []

        query = build_image_query(hotel_name, location)
        params = {"per_page": PHOTOS_PER_HOTEL, "orientation": "landscape"}

        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, transport=self._transport) as client:
                logger.debug(f"Searching Pexels for: {query!r}")
                images = await self._photos(client, "/search", {**params, "query": query})
                if images:
                    return images

                logger.info(f"No images found for {hotel_name}, trying generic search")
                return await self._photos(client, "/search", {**params, "query": FALLBACK_QUERY})
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Error fetching images from Pexels: {e}")
            return []

    async def get_curated_hotel_images(self, count: int = 3) -> List[str]:
        if not self.configured:
            return []
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, transport=self._transport) as client:
                return await self._photos(client, "/curated", {"per_page": count})
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Error fetching curated images from Pexels: {e}")
            return []
