# services/places_client.py
"""
Geoapify Places Client
Geocodes a location and looks up nearby hotels and their details.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from ..config import configured_key, settings
from ..exceptions import PlacesError, PlacesNotConfiguredError


HOTEL_CATEGORY = "accommodation.hotel"

# raw OSM flag -> amenity name
RAW_AMENITY_FLAGS = {
    "internet_access": "internet_access",
    "wheelchair": "wheelchair_accessible",
    "smoking": "smoking_area",
}


class PlacesClient:
    """
    Async Geoapify client.

    Args:
        api_key: Geoapify key (defaults to GEOAPIFY_API_KEY)
        base_url: API root
        radius_meters: Search radius around the geocoded point
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        radius_meters: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = configured_key(api_key) if api_key is not None else settings.geoapify_key
        self.base_url = (base_url or settings.GEOAPIFY_BASE_URL).rstrip("/")
        self.radius_meters = radius_meters or settings.GEOAPIFY_RADIUS_METERS
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> str:
        if not self.api_key:
            raise PlacesNotConfiguredError(
                "Geoapify API key is not configured. Add GEOAPIFY_API_KEY to your .env file"
            )
        return self.api_key

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "apiKey": self._require_key()}
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geoapify request {path} failed: {e}")
            raise PlacesError(f"Geoapify request failed: {e}") from e
        except ValueError as e:
            raise PlacesError(f"Geoapify returned invalid JSON: {e}") from e

    async def geocode(self, location: str) -> Optional[List[float]]:
        """[lon, lat] of the best match, or None"""
        data = await self._get("/v1/geocode/search", {"text": location})
        features = data.get("features") or []
        if not features:
            return None
        return features[0]["geometry"]["coordinates"]

    async def find_hotels(self, location: str) -> List[Dict[str, Any]]:
        """
        Hotels near a location.

        Returns:
            list: [{"id": place_id, "name", "location"}], empty when geocoding finds nothing

        Raises:
            PlacesNotConfiguredError, PlacesError
        """
        coordinates = await self.geocode(location)
        if not coordinates:
            logger.info(f"Geoapify could not geocode {location!r}")
            return []

        lon, lat = coordinates[0], coordinates[1]
        data = await self._get("/v2/places", {
            "categories": HOTEL_CATEGORY,
            "filter": f"circle:{lon},{lat},{self.radius_meters}",
            "bias": f"proximity:{lon},{lat}",
        })

        hotels = []
        for feature in data.get("features") or []:
            props = feature.get("properties") or {}
            if not props.get("place_id"):
                continue
            hotels.append({
                "id": props["place_id"],
                "name": props.get("name"),
                "location": props.get("address_line2"),
            })

        logger.info(f"Geoapify found {len(hotels)} hotels near {location!r}")
        return hotels

    async def get_hotel_details(self, place_id: str) -> Optional[Dict[str, Any]]:
        """
        Details for one place.

        Returns:
            dict: name, location, rating (stars), amenities, phone, website; None if unknown
        """
        data = await self._get("/v2/place-details", {"id": place_id})

        props = data.get("properties")
        if not props and data.get("features"):
            props = data["features"][0].get("properties")
        if not props:
            return None

        raw = (props.get("datasource") or {}).get("raw") or {}

        rating = None
        if raw.get("stars") is not None:
            try:
                rating = int(str(raw["stars"]).split(".")[0])
            except ValueError:
                rating = None

        amenities = [
            name for flag, name in RAW_AMENITY_FLAGS.items()
            if raw.get(flag) and raw.get(flag) != "no"
        ]

        return {
            "name": props.get("name"),
            "location": props.get("address_line2"),
            "rating": rating,
            "amenities": amenities,
            "phone": raw.get("phone"),
            "website": raw.get("website"),
        }
