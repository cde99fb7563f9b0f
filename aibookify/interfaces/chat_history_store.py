# interfaces/chat_history_store.py
"""
Chat History Store
One document per (hotelId, userId) conversation with an append-only message list.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from .database import serialize_doc


AI_SENDER = "AI"
SMART_CHAT_HOTEL_ID = "smart-chat"


class ChatHistoryStore:
    """Persists traveler <-> hotel conversations"""

    def __init__(self, db: Database):
        self.collection = db["chat_histories"]

    def save_message(self, hotel_id: str, user_id: str, content: str, is_ai: bool = False) -> Dict[str, Any]:
        """
        Append a message, creating the history on first use.

        Returns:
            dict: The stored message
        """
        now = datetime.utcnow()
        message = {
            "content": content,
            "sender": AI_SENDER if is_ai else user_id,
            "timestamp": now,
            "isAI": is_ai
        }
        self.collection.find_one_and_update(
            {"hotelId": hotel_id, "userId": user_id},
            {
                "$push": {"messages": message},
                "$set": {"updatedAt": now},
                "$setOnInsert": {"createdAt": now}
            },
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(message)

    def get_history(self, hotel_id: str, user_id: str) -> Dict[str, Any]:
        """History for one conversation; an empty one when none exists"""
        doc = self.collection.find_one({"hotelId": hotel_id, "userId": user_id})
        if not doc:
            return {"hotelId": hotel_id, "userId": user_id, "messages": []}
        return serialize_doc(doc)

    def get_recent(self, hotel_id: str, user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        return self.get_history(hotel_id, user_id)["messages"][-limit:]

    def get_hotel_histories(self, hotel_id: str) -> List[Dict[str, Any]]:
        """All conversations of one hotel, most recently active first"""
        cursor = self.collection.find({"hotelId": hotel_id}).sort("updatedAt", DESCENDING)
        return [serialize_doc(d) for d in cursor]

    def count_active(self, hotel_ids: Optional[List[str]], since: datetime) -> int:
        """Conversations updated since the given time (hotel_ids None = all hotels)"""
        query: Dict[str, Any] = {"updatedAt": {"$gte": since}}
        if hotel_ids is not None:
            query["hotelId"] = {"$in": hotel_ids}
        return self.collection.count_documents(query)
