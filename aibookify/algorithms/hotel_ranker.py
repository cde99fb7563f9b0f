"""
Hotel Ranking Algorithm
Orders candidate hotels for a traveler query

Score Components:
1. Amenity hits  - 2 points per requested amenity the hotel has
2. Name hit      - 5 points when the requested hotel name matches
3. Budget fit    - 0, 1 or 3 points depending on price vs budget category
4. Rating        - 0.5 x rating (capped at 5)
"""

import re
from typing import Any, Dict, List, NamedTuple, Optional

from loguru import logger

from ..config import settings
from ..utils import strip_regex_chars


class HotelScoreBreakdown(NamedTuple):
    """
    Breakdown of a hotel's ranking score
    """
    amenity_score: float
    name_score: float
    budget_score: float
    rating_score: float
    total_score: float

    def __repr__(self) -> str:
        return (
            f"HotelScore(total={self.total_score:.1f}, "
            f"amenity={self.amenity_score:.1f}, "
            f"name={self.name_score:.1f}, "
            f"budget={self.budget_score:.1f}, "
            f"rating={self.rating_score:.1f})"
        )


def budget_score(price: Any, budget: Optional[str]) -> int:
    """
    Score how well a nightly price fits a budget category

    Args:
        price: Nightly price
        budget: "budget", "mid-range" or "luxury"

    Returns:
        int: 3 (good fit), 1 (close), 0 (no fit, no budget or bad price)

    Example:
        >>> budget_score(90, "budget")
        3
        >>> budget_score(220, "luxury")
        1
    """
    try:
        price = float(price)
    except (TypeError, ValueError):
        return 0
    if price <= 0:
        return 0

    level = (budget or "").lower()
    if level == "budget":
        return 3 if price <= 100 else 1 if price <= 150 else 0
    if level in ("mid-range", "midrange"):
        if 80 <= price <= 250:
            return 3
        return 1 if price <= 300 else 0
    if level == "luxury":
        return 3 if price >= 250 else 1 if price >= 200 else 0
    return 0


def score_hotel(
    hotel: Dict[str, Any],
    amenities: Optional[List[str]] = None,
    hotel_name: Optional[str] = None,
    budget: Optional[str] = None
) -> HotelScoreBreakdown:
    """
    Score one hotel against the traveler's request

    Args:
        hotel: Listing or hotel result (name, price, amenities, rating)
        amenities: Requested amenities
        hotel_name: Requested hotel name, matched as case-insensitive substring
        budget: Budget category
    """
    preferred = [str(a).lower() for a in amenities or []]
    have = [str(a).lower() for a in hotel.get("amenities") or []]
    amenity_hits = len([p for p in preferred if p in have])

    name_hit = 0
    cleaned_name = strip_regex_chars(hotel_name) if hotel_name else ""
    if cleaned_name and re.search(re.escape(cleaned_name), hotel.get("name") or "", re.IGNORECASE):
        name_hit = 5

    try:
        rating = float(hotel.get("rating") or 0)
    except (TypeError, ValueError):
        rating = 0.0

    amenity_score = amenity_hits * 2
    price_score = budget_score(hotel.get("price") or 0, budget)
    rating_score = min(rating, 5) * 0.5

    return HotelScoreBreakdown(
        amenity_score=amenity_score,
        name_score=name_hit,
        budget_score=price_score,
        rating_score=rating_score,
        total_score=amenity_score + name_hit + price_score + rating_score
    )


def rank_hotels(
    hotels: List[Dict[str, Any]],
    amenities: Optional[List[str]] = None,
    hotel_name: Optional[str] = None,
    budget: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Sort hotels by score, highest first. Ties keep their input order."""
    scored = [(score_hotel(h, amenities, hotel_name, budget), h) for h in hotels]
    scored.sort(key=lambda pair: pair[0].total_score, reverse=True)

    if scored:
        logger.debug(f"Top hotel: {scored[0][1].get('name')} {scored[0][0]!r}")

    return [hotel for _, hotel in scored]


def dedupe_hotels(hotels: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop hotels whose lowercased name + location was already seen"""
    seen = set()
    result = []
    for hotel in hotels:
        key = f"{(hotel.get('name') or '').lower()}|{(hotel.get('location') or '').lower()}"
        if key in seen:
            continue
        seen.add(key)
        result.append(hotel)
    return result


def to_hotel_result(listing: Dict[str, Any], source: str = "internal") -> Dict[str, Any]:
    """Map a listing document to the hotel card shape"""
    images = listing.get("images")
    if not isinstance(images, list) or not images:
        images = [settings.PLACEHOLDER_IMAGE_URL]

    return {
        "id": str(listing.get("id") or listing.get("_id") or ""),
        "name": listing.get("name") or "Hotel",
        "description": listing.get("description") or "",
        "location": listing.get("location") or "",
        "price": listing.get("price") or 0,
        "amenities": listing.get("amenities") or [],
        "images": images,
        "rating": listing.get("rating") or 4.0,
        "source": listing.get("source") or source,
    }
