# api/listings.py
"""
Listings API Endpoint
Thin CRUD used by the hotel dashboard. Listings are what the concierge searches.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..exceptions import NotFoundError, ValidationFailedError
from ..interfaces import ListingStore
from ..schemas import ListingCreate, ListingUpdate
from ..services import ImageClient
from .dependencies import get_image_client, get_listing_store


router = APIRouter(prefix="/api/listings", tags=["listings"])


@router.post("/add", status_code=201)
async def add_listing(
    body: ListingCreate,
    store: ListingStore = Depends(get_listing_store),
    images: ImageClient = Depends(get_image_client)
) -> Dict[str, Any]:
    """
    Create a listing.
    When no images are supplied, photos are fetched from Pexels.
    """
    data = body.model_dump()

    if not data.get("images") and data.get("name") and images.configured:
        data["images"] = await images.search_hotel_images(data["name"], data.get("location"))

    try:
        listing = store.create(data)
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"New listing created: {listing['id']}")
    return listing


@router.get("/")
async def list_listings(store: ListingStore = Depends(get_listing_store)) -> List[Dict[str, Any]]:
    """Active listings, newest first"""
    return store.list_active()


@router.get("/{listing_id}")
async def get_listing(listing_id: str, store: ListingStore = Depends(get_listing_store)) -> Dict[str, Any]:
    try:
        return store.get(listing_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")


@router.put("/edit/{listing_id}")
async def edit_listing(
    listing_id: str,
    body: ListingUpdate,
    store: ListingStore = Depends(get_listing_store)
) -> Dict[str, Any]:
    try:
        listing = store.update(listing_id, body.model_dump(exclude_none=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")

    logger.info(f"Listing updated: {listing_id}")
    return listing


@router.delete("/delete/{listing_id}")
async def delete_listing(listing_id: str, store: ListingStore = Depends(get_listing_store)):
    try:
        store.delete(listing_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Listing not found")
    return {"message": "Listing deleted successfully"}
