# api/chat.py
"""
Chat API Endpoint
Traveler smart chat, per-hotel assistant replies, chat histories and
interaction logging.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from ..agents.concierge import SmartConcierge, build_hotel_context, get_concierge
from ..exceptions import NotFoundError
from ..interfaces import ChatHistoryStore, InteractionStore, ListingStore
from ..schemas import (
    ChatHistory,
    HotelReplyRequest,
    HotelReplyResponse,
    InteractionCreate,
    SmartChatRequest,
    SmartChatResponse
)
from .dependencies import get_chat_history_store, get_interaction_store, get_listing_store


router = APIRouter(prefix="/api/chat", tags=["chat"])

GUEST_USER_ID = "guest-user"


# ============================================
# Smart chat
# ============================================

@router.post("/smart-chat", response_model=SmartChatResponse)
async def smart_chat(
    body: SmartChatRequest,
    concierge: SmartConcierge = Depends(get_concierge)
):
    """
    Conversational hotel discovery.

    Request: {"message": "...", "userId": "optional"}
    Response: {"response": "...", "hotels": [...]}
    """
    message = (body.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    user_id = body.user_id or GUEST_USER_ID
    logger.info(f"Smart chat request from {user_id}")

    result = await concierge.smart_chat(message, user_id)
    return SmartChatResponse(response=result["text"], hotels=result.get("hotels") or [])


# ============================================
# Per-hotel assistant
# ============================================

@router.post("/generate-response", response_model=HotelReplyResponse, response_model_exclude_none=True)
async def generate_response(
    body: HotelReplyRequest,
    concierge: SmartConcierge = Depends(get_concierge),
    listings: ListingStore = Depends(get_listing_store)
):
    """Reply as a hotel's AI assistant. Hotel context is loaded from the listing when omitted."""
    hotel_context = body.hotel_context
    if not hotel_context:
        if not body.hotel_id:
            raise HTTPException(status_code=400, detail="hotelContext or hotelId is required")
        try:
            hotel_context = build_hotel_context(listings.get(body.hotel_id))
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Listing not found")

    result = await concierge.hotel_reply(body.message, hotel_context, body.user_id)
    return HotelReplyResponse(text=result["text"], hotels=result.get("hotels"))


# ============================================
# Histories
# ============================================

@router.get("/{hotel_id}/history", response_model=ChatHistory)
async def get_history(
    hotel_id: str,
    user_id: str = Query(..., alias="userId"),
    store: ChatHistoryStore = Depends(get_chat_history_store)
):
    """One traveler's conversation with a hotel (empty when none)"""
    return store.get_history(hotel_id, user_id)


@router.get("/{hotel_id}/all-histories", response_model=List[ChatHistory])
async def get_all_histories(
    hotel_id: str,
    store: ChatHistoryStore = Depends(get_chat_history_store)
):
    """All conversations of a hotel, most recent first (hotel dashboard)"""
    return store.get_hotel_histories(hotel_id)


# ============================================
# Interactions
# ============================================

@router.post("/interactions")
async def log_interaction(
    body: InteractionCreate,
    store: InteractionStore = Depends(get_interaction_store)
):
    """Log a click, view or booking for personalization"""
    interaction = store.log(body.user_id, body.action, body.hotel_id, body.metadata)
    return {"message": "Interaction logged", "interaction": interaction}
