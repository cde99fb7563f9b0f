# interfaces/interaction_store.py
"""Interaction log (views, clicks, bookings) used for personalization"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from pymongo import DESCENDING
from pymongo.database import Database

from .database import serialize_doc


class InteractionStore:

    def __init__(self, db: Database):
        self.collection = db["interactions"]

    def log(
        self,
        user_id: str,
        action: str,
        hotel_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        doc = {
            "userId": user_id,
            "hotelId": hotel_id,
            "action": action,
            "metadata": metadata or {},
            "createdAt": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.debug(f"Interaction {action} by {user_id} on {hotel_id}")
        return serialize_doc(doc)

    def for_user(self, user_id: str) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"userId": user_id}).sort("createdAt", DESCENDING)
        return [serialize_doc(d) for d in cursor]
