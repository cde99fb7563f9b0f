"""
Pydantic Schemas Package

Contains all Pydantic v2 models for:
- Query analysis (intent + entities)
- Chat, listing and booking API payloads
"""

from .booking_schemas import (
    # Pipeline
    QueryEntities, QueryAnalysis, HotelResult,
    INTENTS, CONVERSATION_TYPES, BUDGET_LEVELS,
    # Chat
    SmartChatRequest, SmartChatResponse, HotelReplyRequest, HotelReplyResponse,
    ChatMessage, ChatHistory, InteractionCreate,
    # Listings
    ListingCreate, ListingUpdate,
    # Bookings
    GuestDetails, BookingCreate, BookingStatusUpdate, TimeRange
)

__all__ = [
    "QueryEntities", "QueryAnalysis", "HotelResult",
    "INTENTS", "CONVERSATION_TYPES", "BUDGET_LEVELS",
    "SmartChatRequest", "SmartChatResponse", "HotelReplyRequest", "HotelReplyResponse",
    "ChatMessage", "ChatHistory", "InteractionCreate",
    "ListingCreate", "ListingUpdate",
    "GuestDetails", "BookingCreate", "BookingStatusUpdate", "TimeRange"
]
