"""
Pydantic v2 schemas for the AIBookify API
JSON payloads use camelCase (the web client's convention); Python code uses snake_case.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================
# Conversational pipeline
# ============================================

Intent = Literal[
    "search_hotels",
    "get_hotel_details",
    "greeting",
    "small_talk",
    "question",
    "booking_intent",
    "unknown",
]

ConversationType = Literal["casual", "search", "transactional"]

BudgetLevel = Literal["budget", "mid-range", "luxury"]

INTENTS = set(Intent.__args__)
CONVERSATION_TYPES = set(ConversationType.__args__)
BUDGET_LEVELS = set(BudgetLevel.__args__)


class QueryEntities(CamelModel):
    """Entities extracted from a traveler message"""
    location: Optional[str] = None
    hotel_name: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    budget: Optional[BudgetLevel] = None
    budget_amount: Optional[float] = None
    travel_purpose: Optional[str] = None
    emotional_tone: Optional[str] = None


class QueryAnalysis(CamelModel):
    """How the concierge understood a message"""
    intent: Intent = "unknown"
    conversation_type: ConversationType = "casual"
    should_show_hotels: bool = False
    entities: QueryEntities = Field(default_factory=QueryEntities)


class HotelResult(CamelModel):
    """Hotel card returned to the chat UI"""
    id: str
    name: str
    description: str = ""
    location: str = ""
    price: float = 0
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    rating: float = 4.0
    source: str = "internal"
    phone: Optional[str] = None
    website: Optional[str] = None


# ============================================
# Chat API
# ============================================

class SmartChatRequest(CamelModel):
    message: str = ""
    user_id: Optional[str] = None


class SmartChatResponse(CamelModel):
    response: str
    hotels: List[HotelResult] = Field(default_factory=list)


class HotelReplyRequest(CamelModel):
    """Message to a specific hotel's assistant"""
    message: str = Field(..., min_length=1, max_length=2000)
    user_id: str
    hotel_id: Optional[str] = None
    hotel_context: Optional[Dict[str, Any]] = None


class HotelReplyResponse(CamelModel):
    text: str
    hotels: Optional[List[HotelResult]] = None


class ChatMessage(CamelModel):
    content: str
    sender: str
    timestamp: datetime
    is_ai: bool = Field(False, alias="isAI")


class ChatHistory(CamelModel):
    id: Optional[str] = None
    hotel_id: str
    user_id: str
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InteractionCreate(CamelModel):
    """A click, view or booking event used for personalization"""
    user_id: str
    action: str = Field(..., min_length=1)
    hotel_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


# ============================================
# Listings
# ============================================

class ListingCreate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    price: Optional[float] = None
    owner_id: Optional[str] = None
    description: Optional[str] = None
    images: Union[List[str], str, None] = None
    amenities: Union[List[str], str, None] = None
    rating: Optional[float] = None
    social_media_link: Optional[str] = None
    whatsapp_number: Optional[str] = None


class ListingUpdate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    images: Union[List[str], str, None] = None
    amenities: Union[List[str], str, None] = None
    rating: Optional[float] = None
    social_media_link: Optional[str] = None
    whatsapp_number: Optional[str] = None
    is_active: Optional[bool] = None


# ============================================
# Bookings & Commissions
# ============================================

BookingSource = Literal["booking.com", "expedia", "agoda", "hotels.com", "internal"]
BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
TimeRange = Literal["week", "month", "year"]


class GuestDetails(CamelModel):
    name: str
    email: str
    phone: str


class BookingCreate(CamelModel):
    """Booking whose commission should be tracked"""
    booking_id: str
    hotel_id: str
    hotel_name: str
    source: BookingSource
    is_external: bool
    guest_details: GuestDetails
    booking_value: float = Field(..., ge=0)
    commission_rate: float = Field(..., ge=0, le=1)
    check_in_date: datetime
    check_out_date: datetime
    currency: str = "USD"
    external_booking_reference: Optional[str] = None
    notes: Optional[str] = None


class BookingStatusUpdate(CamelModel):
    status: Literal["confirmed", "cancelled", "completed"]
