# interfaces/__init__.py
"""
Interfaces Package

Contains data stores:
- database: MongoDB connection and indexes
- context_store: Short-lived conversation memory (Redis / in-memory)
- listing_store: Hotel listings
- chat_history_store: Traveler <-> hotel conversations
- interaction_store: Personalization events
- commission_store: Bookings and commission analytics
"""

from .database import get_database, ensure_indexes, ping_database
from .context_store import ContextStore, get_context_store
from .listing_store import ListingStore
from .chat_history_store import ChatHistoryStore, SMART_CHAT_HOTEL_ID
from .interaction_store import InteractionStore
from .commission_store import CommissionStore

__all__ = [
    "get_database",
    "ensure_indexes",
    "ping_database",
    "ContextStore",
    "get_context_store",
    "ListingStore",
    "ChatHistoryStore",
    "SMART_CHAT_HOTEL_ID",
    "InteractionStore",
    "CommissionStore"
]
