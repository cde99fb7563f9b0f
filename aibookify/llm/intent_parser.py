# llm/intent_parser.py
"""
Intent Parser for the Smart Concierge
Turns a traveler message into a QueryAnalysis:
- intent and conversation type
- whether hotel cards should be shown
- entities: location, hotel name, amenities, budget, purpose, tone
Uses the LLM when available and regex heuristics otherwise.
"""

import re
from typing import Any, Dict, List, Optional

from loguru import logger

from ..exceptions import LLMError
from ..schemas import QueryAnalysis, QueryEntities, INTENTS, CONVERSATION_TYPES, BUDGET_LEVELS
from ..utils import safe_parse_json, unique
from .prompts import QUERY_ANALYSIS_PROMPT


# ============================================
# Patterns
# ============================================

FAST_GREETING = re.compile(r"^(hi|hello|hey|yo|sup|hola|howdy)[!.,?\s]*$", re.IGNORECASE)

GREETING_PREFIX = re.compile(
    r"^(hi|hello|hey|good morning|good afternoon|good evening|greetings|sup|yo|hola)\b",
    re.IGNORECASE
)

SMALL_TALK_PREFIX = re.compile(
    r"^(how are you|what can you do|who are you|tell me about|can you help)",
    re.IGNORECASE
)

LOCATION_PREPOSITION = re.compile(
    r"\b(?:in|at|near|around)\s+([A-Za-z][A-Za-z\s]*?)"
    r"(?=\s+(?:under|below|for|with|from|on|during|this|next|and|that)\b|[,.!?$\d]|$)",
    re.IGNORECASE
)

LOCATION_SUFFIX = re.compile(r"([A-Za-z][A-Za-z\s]*?)\s+(?:hotels?|accommodations?)\b", re.IGNORECASE)

# "Sarova Stanley Hotel", "Hilton Garden Inn"
HOTEL_NAME = re.compile(
    r"\b([A-Z][A-Za-z0-9'&\-]*(?:\s+[A-Z0-9][A-Za-z0-9'&\-]*)*\s+"
    r"(?:Hotel|Resort|Inn|Suites|Lodge|Villa|Boutique|Marriott|Hilton|Hyatt|Sheraton|Radisson))\b"
)

SIMPLE_LOCATION = re.compile(r"^[A-Z][a-z]{2,}(?:\s+[A-Z][a-z]{2,})?$")

BUDGET_KEYWORD = re.compile(r"budget|cheap|affordable|under|luxury|premium|\$|dollar", re.IGNORECASE)
PURPOSE_KEYWORD = re.compile(r"romantic|business|family|honeymoon|vacation|relaxing", re.IGNORECASE)

CHEAP_WORDS = re.compile(r"\b(budget|cheap|affordable|inexpensive)\b", re.IGNORECASE)
LUXURY_WORDS = re.compile(r"\b(luxury|luxurious|premium|5.star|five.star|upscale)\b", re.IGNORECASE)

PURPOSE_WORDS = {
    "romantic": r"\b(romantic|honeymoon|anniversary)\b",
    "business": r"\b(business|work trip|conference)\b",
    "family": r"\b(family|kids|children)\b",
    "leisure": r"\b(vacation|holiday|relaxing|getaway)\b",
}

AMENITY_PATTERNS = {
    "wifi": [r"wifi", r"wi-fi", r"internet"],
    "pool": [r"pool", r"swimming"],
    "gym": [r"gym", r"fitness"],
    "spa": [r"\bspa\b", r"massage"],
    "parking": [r"parking"],
    "breakfast": [r"breakfast"],
    "restaurant": [r"restaurant", r"dining"],
    "bar": [r"\bbar\b", r"lounge"],
    "pet-friendly": [r"pet[- ]?friendly", r"pets? allowed", r"with (?:my )?(?:dog|pets?)"],
    "air conditioning": [r"air[- ]?con", r"\bac\b"],
    "airport shuttle": [r"airport (?:shuttle|transfer|pickup)"],
    "beach access": [r"beach"],
}

BUDGET_AMOUNT_PATTERNS = [
    r"\$\s?(\d+(?:,\d{3})*(?:\.\d{1,2})?)",
    r"(\d+(?:,\d{3})*)\s*(?:dollars?|usd|bucks?)",
    r"budget\s*(?:of|is|:)?\s*\$?(\d+(?:,\d{3})*)",
    r"(?:under|below|less than)\s*\$?(\d+(?:,\d{3})*)",
    r"(?:max|maximum)\s*\$?(\d+(?:,\d{3})*)",
]

# Words a loose location match may start with that are not part of a place
LOCATION_NOISE = {
    "find", "show", "me", "search", "for", "some", "any", "a", "an", "the", "best",
    "good", "nice", "cheap", "budget", "affordable", "luxury", "premium", "romantic",
    "family", "business", "top", "great", "i", "want", "need", "looking", "book",
}

PLACEHOLDER_VALUES = {"", "null", "none", "unknown", "n/a", "extracted location if present",
                      "specific hotel name if mentioned"}


def budget_level_for_amount(amount: float) -> str:
    """Map a nightly amount to a budget category"""
    if amount <= 100:
        return "budget"
    if amount <= 250:
        return "mid-range"
    return "luxury"


class IntentParser:
    """
    Analyzes traveler messages.
    LLM classification first; regex heuristics when the LLM fails or
    returns something that is not JSON.
    """

    def __init__(self, llm=None):
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            from .client import get_llm_client
            self._llm = get_llm_client()
        return self._llm

    async def analyze(self, query: str) -> QueryAnalysis:
        """
        Analyze a traveler message.

        Args:
            query: Raw message text

        Returns:
            QueryAnalysis
        """
        if FAST_GREETING.match(query.strip()):
            logger.info(f"Fast greeting detection: {query.strip()!r}")
            return QueryAnalysis(intent="greeting", conversation_type="casual", should_show_hotels=False)

        try:
            raw = await self.llm.generate(
                QUERY_ANALYSIS_PROMPT.format(user_query=query),
                temperature=0.2,
                max_tokens=400
            )
        except LLMError as e:
            logger.warning(f"Query analysis LLM failed, using heuristics: {e}")
            return self.heuristic_analysis(query)

        parsed = safe_parse_json(raw)
        if not parsed:
            logger.warning("Query analysis returned no JSON, using heuristics")
            return self.heuristic_analysis(query)

        analysis = self.normalize(parsed, query)
        logger.info(
            f"Intent analysis: intent={analysis.intent}, type={analysis.conversation_type}, "
            f"show_hotels={analysis.should_show_hotels}, location={analysis.entities.location}"
        )
        return analysis

    # ============================================
    # Heuristic fallback
    # ============================================

    def heuristic_analysis(self, query: str) -> QueryAnalysis:
        """Classify a message with regexes only"""
        text = query.strip()

        if GREETING_PREFIX.match(text):
            return QueryAnalysis(intent="greeting", conversation_type="casual", should_show_hotels=False)

        if SMALL_TALK_PREFIX.match(text):
            return QueryAnalysis(intent="small_talk", conversation_type="casual", should_show_hotels=False)

        location = self.extract_location(text)
        hotel_name = self.extract_hotel_name(text)
        is_simple_location = bool(SIMPLE_LOCATION.match(text))
        if is_simple_location and not location:
            location = text

        has_budget_keyword = bool(BUDGET_KEYWORD.search(text)) and len(text) > 5
        has_purpose_keyword = bool(PURPOSE_KEYWORD.search(text)) and len(text) > 5

        is_search = bool(location or hotel_name or is_simple_location or has_budget_keyword or has_purpose_keyword)
        logger.debug(
            f"Fallback heuristics: location={location}, hotel_name={hotel_name}, "
            f"simple_location={is_simple_location}, budget_kw={has_budget_keyword}, "
            f"purpose_kw={has_purpose_keyword}"
        )

        budget = None
        if CHEAP_WORDS.search(text):
            budget = "budget"
        elif LUXURY_WORDS.search(text):
            budget = "luxury"

        entities = QueryEntities(
            location=location,
            hotel_name=hotel_name,
            budget=budget,
            travel_purpose=self.extract_purpose(text)
        )
        self._enrich(entities, text)

        return QueryAnalysis(
            intent="search_hotels" if is_search else "question",
            conversation_type="search" if is_search else "casual",
            should_show_hotels=is_search,
            entities=entities
        )

    # ============================================
    # LLM output normalization
    # ============================================

    def normalize(self, parsed: Dict[str, Any], query: str) -> QueryAnalysis:
        """Coerce raw model JSON into a valid QueryAnalysis"""
        intent = parsed.get("intent")
        if intent not in INTENTS:
            intent = "unknown"

        raw_entities = parsed.get("entities")
        if not isinstance(raw_entities, dict):
            raw_entities = {}

        budget = _clean_str(raw_entities.get("budget"))
        if budget:
            budget = budget.lower().replace("midrange", "mid-range").replace("mid range", "mid-range")
            if budget not in BUDGET_LEVELS:
                budget = None

        amenities = raw_entities.get("amenities")
        if isinstance(amenities, str):
            amenities = [amenities]
        if not isinstance(amenities, list):
            amenities = []

        entities = QueryEntities(
            location=_clean_str(raw_entities.get("location")),
            hotel_name=_clean_str(raw_entities.get("hotelName") or raw_entities.get("hotel_name")),
            amenities=[a.strip() for a in amenities if isinstance(a, str) and _clean_str(a)],
            budget=budget,
            budget_amount=_to_float(raw_entities.get("budgetAmount")),
            travel_purpose=_clean_str(raw_entities.get("travelPurpose")),
            emotional_tone=_clean_str(raw_entities.get("emotionalTone"))
        )

        conversation_type = parsed.get("conversationType")
        if conversation_type not in CONVERSATION_TYPES:
            if intent == "search_hotels":
                conversation_type = "search"
            elif intent in ("booking_intent", "get_hotel_details"):
                conversation_type = "transactional"
            else:
                conversation_type = "casual"

        should_show = parsed.get("shouldShowHotels")
        if not isinstance(should_show, bool):
            should_show = intent == "search_hotels" and bool(entities.location)

        if intent == "search_hotels" and not entities.hotel_name:
            entities.hotel_name = self.extract_hotel_name(query)

        self._enrich(entities, query)

        return QueryAnalysis(
            intent=intent,
            conversation_type=conversation_type,
            should_show_hotels=should_show,
            entities=entities
        )

    def _enrich(self, entities: QueryEntities, text: str) -> None:
        """Add amenities and a budget amount the first pass missed"""
        entities.amenities = unique(entities.amenities + self.extract_amenities(text))

        if entities.budget_amount is None:
            entities.budget_amount = self.extract_budget_amount(text)
        if entities.budget_amount is not None and not entities.budget:
            entities.budget = budget_level_for_amount(entities.budget_amount)

    # ============================================
    # Entity extractors
    # ============================================

    def extract_location(self, text: str) -> Optional[str]:
        """'hotels in Nairobi under $100' -> 'Nairobi'; 'Mombasa hotels' -> 'Mombasa'"""
        for pattern in (LOCATION_PREPOSITION, LOCATION_SUFFIX):
            match = pattern.search(text)
            if not match:
                continue
            words = match.group(1).split()
            while words and words[0].lower() in LOCATION_NOISE:
                words.pop(0)
            if words:
                return " ".join(words)
        return None

    def extract_hotel_name(self, text: str) -> Optional[str]:
        match = HOTEL_NAME.search(text)
        return match.group(1).strip() if match else None

    def extract_amenities(self, text: str) -> List[str]:
        lowered = text.lower()
        found = []
        for amenity, patterns in AMENITY_PATTERNS.items():
            if any(re.search(p, lowered) for p in patterns):
                found.append(amenity)
        return found

    def extract_budget_amount(self, text: str) -> Optional[float]:
        lowered = text.lower()
        for pattern in BUDGET_AMOUNT_PATTERNS:
            match = re.search(pattern, lowered)
            if match:
                try:
                    return float(match.group(1).replace(",", ""))
                except ValueError:
                    continue
        return None

    def extract_purpose(self, text: str) -> Optional[str]:
        for purpose, pattern in PURPOSE_WORDS.items():
            if re.search(pattern, text, re.IGNORECASE):
                return purpose
        return None


def _clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if value.lower() in PLACEHOLDER_VALUES:
        return None
    return value


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(str(value).replace("$", "").replace(",", ""))
    except ValueError:
        return None
