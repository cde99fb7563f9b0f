# interfaces/database.py
"""
MongoDB Connection
Lazily created client plus index setup for the AIBookify collections:
listings, chat_histories, interactions, commission_tracking
"""

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from loguru import logger
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..config import settings


_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """Get or create the global MongoClient"""
    global _client
    if _client is None:
        _client = MongoClient(settings.MONGO_URI, serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS)
        logger.info(f"MongoDB client created: {settings.MONGO_URI}/{settings.MONGO_DB}")
    return _client


def get_database() -> Database:
    """FastAPI dependency returning the application database"""
    return get_client()[settings.MONGO_DB]


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")


def ensure_indexes(db: Database):
    """Create the indexes the stores rely on (idempotent)"""
    db["chat_histories"].create_index([("hotelId", ASCENDING), ("userId", ASCENDING)])
    db["interactions"].create_index([("userId", ASCENDING), ("hotelId", ASCENDING)])

    commissions = db["commission_tracking"]
    commissions.create_index("bookingId", unique=True)
    commissions.create_index([("hotelId", ASCENDING), ("createdAt", DESCENDING)])
    commissions.create_index([("source", ASCENDING), ("status", ASCENDING)])
    commissions.create_index([("paymentStatus", ASCENDING), ("createdAt", DESCENDING)])

    logger.info("MongoDB indexes ensured")


def ping_database(db: Database) -> bool:
    try:
        db.command("ping")
        return True
    except PyMongoError as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


# ============================================
# Document helpers
# ============================================

def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string; None when it is not a valid ObjectId"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Replace Mongo's _id with a string id and datetimes with ISO strings"""
    if doc is None:
        return None
    result = {}
    for key, value in doc.items():
        if key == "_id":
            result["id"] = str(value)
        elif isinstance(value, ObjectId):
            result[key] = str(value)
        elif isinstance(value, datetime):
            result[key] = value.isoformat()
        elif isinstance(value, dict):
            result[key] = serialize_doc(value)
        elif isinstance(value, list):
            result[key] = [serialize_doc(v) if isinstance(v, dict) else
                           v.isoformat() if isinstance(v, datetime) else v for v in value]
        else:
            result[key] = value
    return result
