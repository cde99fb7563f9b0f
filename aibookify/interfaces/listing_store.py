# interfaces/listing_store.py
"""
Listing Store
Hotel listings managed from the dashboard and searched by the concierge.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from pymongo import DESCENDING
from pymongo.database import Database

from ..exceptions import NotFoundError, ValidationFailedError
from ..utils import strip_regex_chars
from .database import serialize_doc, to_object_id


REQUIRED_FIELDS = ("name", "location", "price", "ownerId")

# snake_case input -> stored camelCase field
EDITABLE_FIELDS = {
    "name": "name",
    "description": "description",
    "location": "location",
    "price": "price",
    "amenities": "amenities",
    "images": "images",
    "rating": "rating",
    "social_media_link": "socialMediaLink",
    "whatsapp_number": "whatsappNumber",
    "is_active": "isActive",
}


def _as_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [v for v in value if v]
    return [value]


class ListingStore:
    """CRUD and search over the listings collection"""

    def __init__(self, db: Database):
        self.collection = db["listings"]

    # ============================================
    # CRUD
    # ============================================

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a listing.

        Args:
            data: snake_case fields (name, location, price, owner_id required)

        Raises:
            ValidationFailedError: a required field is missing
        """
        doc = {
            "name": data.get("name"),
            "location": data.get("location"),
            "price": data.get("price"),
            "ownerId": data.get("owner_id"),
        }
        missing = [field for field in REQUIRED_FIELDS if doc[field] in (None, "")]
        if missing:
            raise ValidationFailedError(f"Missing required fields: {', '.join(missing)}")

        now = datetime.utcnow()
        doc.update({
            "description": data.get("description") or f"Beautiful accommodation in {doc['location']}",
            "amenities": _as_list(data.get("amenities")),
            "images": _as_list(data.get("images")),
            "rating": data.get("rating") if data.get("rating") is not None else 4.0,
            "socialMediaLink": data.get("social_media_link"),
            "whatsappNumber": data.get("whatsapp_number"),
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        })

        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created listing {result.inserted_id}: {doc['name']} ({doc['location']})")
        return serialize_doc(doc)

    def get(self, listing_id: str) -> Dict[str, Any]:
        """Raises NotFoundError for unknown or malformed ids"""
        oid = to_object_id(listing_id)
        doc = self.collection.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError(f"Listing not found: {listing_id}")
        return serialize_doc(doc)

    def update(self, listing_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update only the provided (non-None) fields"""
        oid = to_object_id(listing_id)
        if not oid:
            raise NotFoundError(f"Listing not found: {listing_id}")

        changes = {}
        for key, field in EDITABLE_FIELDS.items():
            value = updates.get(key)
            if value is None:
                continue
            if field in ("amenities", "images"):
                value = _as_list(value)
            changes[field] = value
        changes["updatedAt"] = datetime.utcnow()

        result = self.collection.update_one({"_id": oid}, {"$set": changes})
        if result.matched_count == 0:
            raise NotFoundError(f"Listing not found: {listing_id}")
        return self.get(listing_id)

    def delete(self, listing_id: str):
        oid = to_object_id(listing_id)
        result = self.collection.delete_one({"_id": oid}) if oid else None
        if not result or result.deleted_count == 0:
            raise NotFoundError(f"Listing not found: {listing_id}")
        logger.info(f"Deleted listing {listing_id}")

    def list_active(self) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in self.collection.find({"isActive": True}).sort("createdAt", DESCENDING)]

    def list_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """Listings of one hotel manager, newest first"""
        cursor = self.collection.find({"ownerId": owner_id}).sort("createdAt", DESCENDING)
        return [serialize_doc(d) for d in cursor]

    def ids_for_owner(self, owner_id: str) -> List[str]:
        return [str(d["_id"]) for d in self.collection.find({"ownerId": owner_id}, {"_id": 1})]

    # ============================================
    # Search primitives (concierge pipeline)
    # ============================================

    def find_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Exact case-insensitive name match (max 3), else substring match (max 5)"""
        name = (name or "").strip()
        if not name:
            return []

        exact = re.compile(f"^{re.escape(name)}$", re.IGNORECASE)
        docs = list(self.collection.find({"isActive": True, "name": exact}).limit(3))
        if not docs:
            cleaned = strip_regex_chars(name)
            if cleaned:
                contains = re.compile(re.escape(cleaned), re.IGNORECASE)
                docs = list(self.collection.find({"isActive": True, "name": contains}).limit(5))

        return [serialize_doc(d) for d in docs]

    def search(
        self,
        location: Optional[str] = None,
        amenities: Optional[List[str]] = None,
        limit: int = 20
    ) -> List[Dict[str, Any]]:
        """
        Flexible search.

        Args:
            location: matched as a case-insensitive substring of location, name or description
            amenities: listing must have at least one (case-insensitive)
            limit: max results
        """
        query: Dict[str, Any] = {"isActive": True}

        term = strip_regex_chars(location or "")
        if term:
            regex = re.compile(re.escape(term), re.IGNORECASE)
            query["$or"] = [{"location": regex}, {"name": regex}, {"description": regex}]

        if amenities:
            query["amenities"] = {"$in": [re.compile(f"^{re.escape(a)}$", re.IGNORECASE) for a in amenities]}

        docs = list(self.collection.find(query).limit(limit))
        logger.debug(f"Listing search location={location!r} amenities={amenities} -> {len(docs)}")
        return [serialize_doc(d) for d in docs]

    def search_text(self, term: str, limit: int = 6) -> List[Dict[str, Any]]:
        """Substring match over name, location or description"""
        cleaned = strip_regex_chars(term or "")
        if not cleaned:
            return []
        regex = re.compile(re.escape(cleaned), re.IGNORECASE)
        query = {"isActive": True, "$or": [{"name": regex}, {"location": regex}, {"description": regex}]}
        return [serialize_doc(d) for d in self.collection.find(query).limit(limit)]

    def sample(self, limit: int = 6) -> List[Dict[str, Any]]:
        """Broad fallback: any active listings"""
        return [serialize_doc(d) for d in self.collection.find({"isActive": True}).limit(limit)]
