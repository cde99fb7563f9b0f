"""
Smart Concierge - Traveler-facing Conversational AI
Runs the chat pipeline: remember -> analyze -> search -> rank -> respond,
and the per-hotel assistant used in hotel chat rooms.
"""

import re
from typing import Any, Dict, List, Optional

from loguru import logger
from pymongo.errors import PyMongoError

from ..algorithms import rank_hotels, to_hotel_result
from ..config import settings
from ..exceptions import LLMError
from ..interfaces.chat_history_store import ChatHistoryStore, SMART_CHAT_HOTEL_ID
from ..interfaces.context_store import ContextStore, get_context_store
from ..interfaces.listing_store import ListingStore
from ..llm.intent_parser import IntentParser
from ..llm.prompts import TRAVEL_RESPONSE_PROMPT, hotel_assistant_system_prompt
from ..schemas import QueryAnalysis
from ..services import ExternalHotelSearch
from ..utils import format_price, truncate_text


HOTEL_SEARCH_REQUEST = re.compile(r"\b(find|search|show|available|nearby|near|in)\s+([\w\-\s]+)", re.IGNORECASE)
SIMPLE_GREETING = re.compile(r"^(hi|hello|hey|yo|hola)\b", re.IGNORECASE)

FALLBACK_GREETING = (
    "I'm your dedicated travel expert, and I'm here to help you find the perfect stay! "
    "Tell me about your dream destination and I'll find accommodations that fit. "
    "What location are you interested in?"
)

HOTEL_ASSISTANT_APOLOGY = (
    "I apologize, but I couldn't generate a response right now. "
    "A member of our staff will get back to you shortly."
)

CLARIFY_LOCATION = "Which city or area are you thinking about?"
CLARIFY_BUDGET = "What's your budget per night roughly?"
CLARIFY_PURPOSE = "Is this for business, vacation, or something special?"


def build_hotel_context(listing: Dict[str, Any]) -> Dict[str, Any]:
    """Hotel facts given to the per-hotel assistant"""
    return {
        "id": str(listing.get("id") or listing.get("_id") or ""),
        "name": listing.get("name"),
        "location": listing.get("location"),
        "priceRange": f"{format_price(listing.get('price') or 0)}/night",
        "amenities": listing.get("amenities") or [],
        "availableRooms": "Contact us for availability",
    }


def fallback_reply(query: str, hotels: List[Dict[str, Any]], intent: Optional[str], llm_failed: bool = False) -> str:
    """Canned reply used when the model gives nothing usable"""
    count = len(hotels)
    plural = "" if count == 1 else "s"

    if count:
        if llm_failed:
            return f"I've got {count} solid option{plural} here. Want me to walk you through the top picks?"
        return (f"I found {count} great option{plural} for you! "
                "Let me highlight the best matches based on what you're looking for.")

    if SIMPLE_GREETING.match(query.strip()) or intent == "greeting":
        return ("Hey there! Great to meet you. I'm your travel buddy. What kind of trip are you "
                "thinking about: a relaxing escape, a city adventure, business, something romantic?")

    if intent == "small_talk":
        return ("I'm here and ready to help with travel whenever you are. "
                "Got a destination in mind or just exploring ideas?")

    return ("Tell me your destination (city or area) and any preferences (budget, vibe, "
            "must-have amenities) and I'll start finding options.")


class SmartConcierge:
    """
    Smart Concierge

    Responsibilities:
    1. Keep short-lived conversational memory per traveler
    2. Understand what the traveler wants (intent + entities)
    3. Find and rank hotels (database, then Geoapify)
    4. Write the reply, falling back to canned answers when the LLM fails
    5. Answer guests inside a specific hotel's chat
    """

    def __init__(
        self,
        listings: ListingStore,
        chat_histories: ChatHistoryStore,
        context_store: Optional[ContextStore] = None,
        llm=None,
        intent_parser: Optional[IntentParser] = None,
        external_search: Optional[ExternalHotelSearch] = None
    ):
        self.listings = listings
        self.chat_histories = chat_histories
        self.context = context_store or get_context_store()
        if llm is None:
            from ..llm.client import get_llm_client
            llm = get_llm_client()
        self.llm = llm
        self.intent_parser = intent_parser or IntentParser(llm)
        self.external_search = external_search or ExternalHotelSearch()

    # ============================================
    # Smart chat
    # ============================================

    async def smart_chat(self, message: str, user_id: str) -> Dict[str, Any]:
        """Smart chat with both sides of the exchange persisted under 'smart-chat'"""
        self.chat_histories.save_message(SMART_CHAT_HOTEL_ID, user_id, message)
        result = await self.get_smart_response(message, user_id)
        self.chat_histories.save_message(SMART_CHAT_HOTEL_ID, user_id, result["text"], is_ai=True)
        return result

    async def get_smart_response(self, query: str, user_id: str = "guest") -> Dict[str, Any]:
        """
        Answer a traveler message.

        Args:
            query: Traveler message
            user_id: Traveler id (conversation memory key)

        Returns:
            dict: {"text": str, "hotels": [hotel result dicts]}
        """
        try:
            logger.info(f"Processing query for user {user_id}: {truncate_text(query, 80)!r}")

            self.context.save_user_message(user_id, query)
            await self.context.update_preferences(user_id, query, self.llm)

            history = self.context.get_conversation_history(user_id)
            preferences = self.context.get_user_preferences(user_id)

            analysis = await self.intent_parser.analyze(query)

            hotels: List[Dict[str, Any]] = []
            if analysis.should_show_hotels and analysis.intent == "search_hotels":
                hotels = await self.search_hotels(analysis)
                if analysis.entities.location:
                    self.context.record_search(user_id, analysis.entities.location)
                logger.info(f"Found {len(hotels)} hotels")
            else:
                logger.info(f"Conversational mode (intent={analysis.intent}), no hotel search")

            state = self.context.get_state(user_id)
            clarifiers = self.clarifying_questions(analysis, state, hotels)

            text = await self.generate_response(
                query,
                hotels,
                history=history,
                preferences=preferences,
                emotion=state.get("last_emotion"),
                intent=analysis.intent,
                clarifiers=clarifiers
            )

            self.context.save_ai_message(user_id, text)
            return {"text": text, "hotels": hotels}

        except Exception:
            logger.exception("Error in get_smart_response")
            return {"text": FALLBACK_GREETING, "hotels": []}

    async def search_hotels(self, analysis: QueryAnalysis) -> List[Dict[str, Any]]:
        """
        Hotel lookup cascade:
        name match -> flexible database search -> Geoapify -> broad database sample
        """
        entities = analysis.entities
        limit = settings.MAX_HOTEL_RESULTS

        try:
            listings = self.listings.find_by_name(entities.hotel_name) if entities.hotel_name else []
            if not listings:
                listings = self.listings.search(entities.location, entities.amenities)
        except PyMongoError as e:
            logger.error(f"Listing search failed: {e}")
            listings = []

        hotels = [to_hotel_result(listing) for listing in listings]

        if not hotels and entities.location:
            external = await self.external_search.search(analysis)
            if external:
                return external[:limit]

            logger.info("No results found, trying broader search")
            try:
                hotels = [to_hotel_result(listing) for listing in self.listings.sample(limit)]
            except PyMongoError as e:
                logger.error(f"Listing sample failed: {e}")

        ranked = rank_hotels(hotels, entities.amenities, entities.hotel_name, entities.budget)
        return ranked[:limit]

    def clarifying_questions(
        self,
        analysis: QueryAnalysis,
        state: Dict[str, Optional[str]],
        hotels: List[Dict[str, Any]]
    ) -> List[str]:
        """At most two follow-up questions, only while searching"""
        if analysis.intent != "search_hotels" and analysis.conversation_type != "search":
            return []

        entities = analysis.entities
        questions = []
        if not (entities.location or "").strip():
            questions.append(CLARIFY_LOCATION)
        if not entities.budget:
            questions.append(CLARIFY_BUDGET)
        if not (entities.travel_purpose or state.get("last_purpose")) and not hotels:
            questions.append(CLARIFY_PURPOSE)
        return questions[:2]

    async def generate_response(
        self,
        query: str,
        hotels: List[Dict[str, Any]],
        history: str = "",
        preferences: str = "",
        emotion: Optional[str] = None,
        intent: Optional[str] = None,
        clarifiers: Optional[List[str]] = None
    ) -> str:
        memory = " | ".join(line.strip() for line in history.splitlines()[-12:] if line.strip())

        clarifier = ""
        if clarifiers and not hotels:
            clarifier = f"If they haven't given enough to search yet, casually ask: {clarifiers[0]}\n"

        prompt = TRAVEL_RESPONSE_PROMPT.format(
            memory=memory or "(first interaction)",
            preferences=preferences or "(getting to know user)",
            emotion=emotion or "neutral",
            intent=intent or "unknown",
            user_query=query,
            mode="HOTEL SEARCH" if hotels else "CASUAL/INFO",
            hotel_count=len(hotels),
            hotel_details=self._describe_hotels(hotels),
            style_hint=("Highlight the top 2 hotels with specific compelling reasons" if hotels
                        else "Focus on understanding what they need before searching"),
            clarifier=clarifier
        )

        try:
            text = await self.llm.generate(prompt, temperature=0.7, max_tokens=400)
        except LLMError as e:
            logger.warning(f"Response generation failed, using fallback: {e}")
            return fallback_reply(query, hotels, intent, llm_failed=True)

        text = text.strip()
        if hotels:
            return text
        if len(text) > 10:
            return text
        return fallback_reply(query, hotels, intent)

    def _describe_hotels(self, hotels: List[Dict[str, Any]]) -> str:
        if not hotels:
            return "No exact matches found in our current database."

        lines = []
        for idx, hotel in enumerate(hotels, start=1):
            price = hotel.get("price") or 0
            price_text = f"{format_price(price)}/night" if price else "price on request"
            lines.append(
                f"{idx}. {hotel['name']}\n"
                f"   Location: {hotel.get('location') or 'N/A'}\n"
                f"   Price: {price_text}\n"
                f"   Rating: {hotel.get('rating')}/5.0\n"
                f"   Amenities: {', '.join((hotel.get('amenities') or [])[:5]) or 'N/A'}\n"
                f"   {truncate_text(hotel.get('description') or '', 100)}"
            )
        return "\n\n".join(lines)

    # ============================================
    # Per-hotel assistant
    # ============================================

    async def hotel_reply(self, message: str, hotel_context: Optional[Dict[str, Any]], user_id: str) -> Dict[str, Any]:
        """
        Reply as a specific hotel's assistant.

        Args:
            message: Guest message
            hotel_context: Output of build_hotel_context (or a client-provided equivalent)
            user_id: Guest id

        Returns:
            dict: {"text": str} plus "hotels" when the guest asked to find listings
        """
        hotel_context = hotel_context or {}
        hotel_id = str(hotel_context.get("id") or "general")

        self.chat_histories.save_message(hotel_id, user_id, message)

        # previous 5 turns; the current message is sent as the prompt
        recent = self.chat_histories.get_recent(hotel_id, user_id, limit=6)[:-1]
        history = [
            {"role": "assistant" if msg.get("isAI") else "user", "content": msg["content"]}
            for msg in recent
        ]

        hotels = []
        match = HOTEL_SEARCH_REQUEST.search(message)
        if match:
            term = (match.group(2) or message).strip()
            try:
                hotels = [to_hotel_result(listing) for listing in self.listings.search_text(term, limit=6)]
            except PyMongoError as e:
                logger.error(f"Listing search error: {e}")

        try:
            text = await self.llm.generate(
                message,
                system=hotel_assistant_system_prompt(hotel_context),
                history=history,
                temperature=0.3,
                max_tokens=150
            )
        except LLMError as e:
            logger.warning(f"Hotel assistant failed for hotel {hotel_id}: {e}")
            text = HOTEL_ASSISTANT_APOLOGY

        self.chat_histories.save_message(hotel_id, user_id, text, is_ai=True)

        if hotels:
            return {"text": text, "hotels": hotels}
        return {"text": text}


# ============================================
# Global Instance
# ============================================

_concierge: Optional[SmartConcierge] = None


def get_concierge() -> SmartConcierge:
    """Get or create the global Smart Concierge"""
    global _concierge
    if _concierge is None:
        from ..interfaces.database import get_database
        db = get_database()
        _concierge = SmartConcierge(ListingStore(db), ChatHistoryStore(db))
        logger.info("Smart Concierge initialized")
    return _concierge
