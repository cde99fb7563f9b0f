"""Tests for the SmartConcierge chat pipeline and per-hotel assistant."""

import asyncio

import httpx
import pytest

from aibookify.agents import SmartConcierge, build_hotel_context, fallback_reply
from aibookify.agents.concierge import (
    CLARIFY_BUDGET,
    CLARIFY_LOCATION,
    CLARIFY_PURPOSE,
    FALLBACK_GREETING,
    HOTEL_ASSISTANT_APOLOGY,
    HOTEL_SEARCH_REQUEST,
)
from aibookify.config import settings
from aibookify.exceptions import LLMError
from aibookify.interfaces import SMART_CHAT_HOTEL_ID
from aibookify.llm import LLMClient
from aibookify.schemas import QueryAnalysis, QueryEntities
from aibookify.services import ExternalHotelSearch, ImageClient, PlacesClient

from .conftest import ANALYSIS_MARKER, FakeLLM


DEFAULT_REPLY = "I found some lovely places for you to consider."


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def make_concierge(listings, chat_histories, context_store, offline_external_search):
    """Build a concierge around a custom FakeLLM."""
    def factory(llm: FakeLLM) -> SmartConcierge:
        return SmartConcierge(
            listings,
            chat_histories,
            context_store=context_store,
            llm=llm,
            external_search=offline_external_search
        )
    return factory


class TestSmartResponse:

    def test_greeting_skips_analysis_and_search(self, concierge, llm, nairobi_listing):
        result = run(concierge.get_smart_response("hello", "u1"))

        assert result == {"text": DEFAULT_REPLY, "hotels": []}
        assert llm.calls_with(ANALYSIS_MARKER) == []

    def test_search_returns_matching_hotels(self, concierge, llm, nairobi_listing, westlands_listing):
        result = run(concierge.get_smart_response("hotels in Nairobi with a pool", "u1"))

        assert [h["name"] for h in result["hotels"]] == ["Sarova Stanley"]
        assert result["hotels"][0]["source"] == "internal"
        assert result["text"] == DEFAULT_REPLY

        response_prompt = llm.calls[-1]["prompt"]
        assert "HOTELS FOUND (1)" in response_prompt
        assert "Sarova Stanley" in response_prompt
        assert "CONVERSATION TYPE: HOTEL SEARCH" in response_prompt
        assert llm.calls[-1]["temperature"] == 0.7
        assert llm.calls[-1]["max_tokens"] == 400

    def test_search_is_remembered(self, concierge, context_store, nairobi_listing):
        run(concierge.get_smart_response("hotels in Nairobi", "u1"))

        assert context_store._load("u1")["preferences"]["previous_searches"] == ["Nairobi"]
        assert [m["role"] for m in context_store.get_messages("u1")] == ["user", "assistant"]

    def test_budget_ranks_cheaper_hotel_first(self, concierge, nairobi_listing, westlands_listing):
        result = run(concierge.get_smart_response("cheap hotels in Nairobi", "u1"))
        assert [h["name"] for h in result["hotels"]] == ["Kiboko Inn", "Sarova Stanley"]

    def test_unknown_location_falls_back_to_sample(self, concierge, nairobi_listing):
        result = run(concierge.get_smart_response("hotels in Mombasa", "u1"))
        assert [h["name"] for h in result["hotels"]] == ["Sarova Stanley"]

    def test_clarifier_added_when_nothing_to_search(self, concierge, llm):
        result = run(concierge.get_smart_response("cheap hotels", "u1"))

        assert result["hotels"] == []
        assert CLARIFY_LOCATION in llm.calls[-1]["prompt"]

    def test_model_analysis_is_used(self, make_concierge, nairobi_listing):
        llm = FakeLLM(analysis='{"intent": "search_hotels", "entities": {"location": "Nairobi"}}')
        result = run(make_concierge(llm).get_smart_response("somewhere in the capital please", "u1"))
        assert [h["name"] for h in result["hotels"]] == ["Sarova Stanley"]


class TestFallbacks:

    def test_reply_failure_with_hotels(self, make_concierge, nairobi_listing):
        concierge = make_concierge(FakeLLM(reply=LLMError("down")))
        result = run(concierge.get_smart_response("hotels in Nairobi", "u1"))

        assert len(result["hotels"]) == 1
        assert result["text"] == fallback_reply("", result["hotels"], "search_hotels", llm_failed=True)

    def test_too_short_reply_without_hotels(self, make_concierge):
        concierge = make_concierge(FakeLLM(reply="ok"))
        result = run(concierge.get_smart_response("What's the weather like", "u1"))
        assert result["text"].startswith("Tell me your destination")

    def test_unexpected_error_returns_greeting(self, make_concierge):
        concierge = make_concierge(FakeLLM(analysis=RuntimeError("boom")))
        result = run(concierge.get_smart_response("hotels in Nairobi", "u1"))
        assert result == {"text": FALLBACK_GREETING, "hotels": []}

    def test_preference_failure_is_ignored(self, make_concierge, nairobi_listing):
        concierge = make_concierge(FakeLLM(preferences=RuntimeError("boom")))
        result = run(concierge.get_smart_response("hotels in Nairobi", "u1"))

        assert [h["name"] for h in result["hotels"]] == ["Sarova Stanley"]
        assert result["text"] == DEFAULT_REPLY

    def test_fallback_reply_variants(self):
        hotels = [{"name": "A"}, {"name": "B"}]
        assert fallback_reply("x", hotels, "search_hotels").startswith("I found 2 great options")
        assert "1 solid option here" in fallback_reply("x", hotels[:1], "search_hotels", llm_failed=True)
        assert fallback_reply("hey there", [], None).startswith("Hey there!")
        assert fallback_reply("how are you", [], "small_talk").startswith("I'm here and ready")


class TestSmartChatPersistence:

    def test_both_sides_saved(self, concierge, chat_histories):
        run(concierge.smart_chat("hello", "u1"))

        messages = chat_histories.get_history(SMART_CHAT_HOTEL_ID, "u1")["messages"]
        assert [(m["content"], m["isAI"]) for m in messages] == [("hello", False), (DEFAULT_REPLY, True)]


class TestClarifyingQuestions:

    @staticmethod
    def analysis(**entities) -> QueryAnalysis:
        return QueryAnalysis(
            intent="search_hotels",
            conversation_type="search",
            should_show_hotels=True,
            entities=QueryEntities(**entities)
        )

    def test_missing_location_and_budget(self, concierge):
        questions = concierge.clarifying_questions(self.analysis(), {}, [])
        assert questions == [CLARIFY_LOCATION, CLARIFY_BUDGET]

    def test_purpose_only_without_hotels(self, concierge):
        analysis = self.analysis(location="Nairobi", budget="luxury")
        assert concierge.clarifying_questions(analysis, {}, []) == [CLARIFY_PURPOSE]
        assert concierge.clarifying_questions(analysis, {}, [{"name": "A"}]) == []
        assert concierge.clarifying_questions(analysis, {"last_purpose": "business"}, []) == []

    def test_not_searching(self, concierge):
        assert concierge.clarifying_questions(QueryAnalysis(intent="greeting"), {}, []) == []


class TestHotelReply:

    def test_context_from_listing(self, nairobi_listing):
        context = build_hotel_context(nairobi_listing)
        assert context["id"] == nairobi_listing["id"]
        assert context["priceRange"] == "$180/night"
        assert context["amenities"] == ["pool", "wifi", "spa"]

    def test_reply_uses_hotel_prompt_and_history(self, concierge, llm, chat_histories, nairobi_listing):
        context = build_hotel_context(nairobi_listing)

        first = run(concierge.hotel_reply("Is breakfast included?", context, "u1"))
        second = run(concierge.hotel_reply("And parking?", context, "u1"))

        assert first == {"text": DEFAULT_REPLY}
        assert second == {"text": DEFAULT_REPLY}

        call = llm.calls[-1]
        assert call["prompt"] == "And parking?"
        assert "Sarova Stanley" in call["system"]
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 150
        assert call["history"] == [
            {"role": "user", "content": "Is breakfast included?"},
            {"role": "assistant", "content": DEFAULT_REPLY},
        ]
        assert len(chat_histories.get_history(nairobi_listing["id"], "u1")["messages"]) == 4

    def test_search_request_attaches_hotels(self, concierge, nairobi_listing, westlands_listing):
        result = run(concierge.hotel_reply("Any rooms near Westlands?", build_hotel_context(nairobi_listing), "u1"))
        assert [h["name"] for h in result["hotels"]] == ["Kiboko Inn"]

    def test_model_failure_apologizes(self, make_concierge, chat_histories):
        concierge = make_concierge(FakeLLM(reply=LLMError("down")))
        result = run(concierge.hotel_reply("Hello?", {"id": "h1", "name": "Test"}, "u1"))

        assert result == {"text": HOTEL_ASSISTANT_APOLOGY}
        assert chat_histories.get_history("h1", "u1")["messages"][-1]["content"] == HOTEL_ASSISTANT_APOLOGY

    def test_missing_context_uses_general_history(self, concierge, chat_histories):
        run(concierge.hotel_reply("Hello?", None, "u1"))
        assert len(chat_histories.get_history("general", "u1")["messages"]) == 2

    def test_garbled_model_server_reply_apologizes(self, make_concierge):
        def handler(request):
            return httpx.Response(200, text="<html>proxy</html>")

        async def call():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
                llm = LLMClient(api_key="", model="llama3.2", ollama_url="http://ollama.test", http_client=http_client)
                return await make_concierge(llm).hotel_reply("Hello?", {"id": "h1", "name": "Test"}, "u1")

        assert run(call()) == {"text": HOTEL_ASSISTANT_APOLOGY}


def coastal_places_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/v1/geocode/search":
        return httpx.Response(200, json={"features": [{"geometry": {"coordinates": [39.66, -4.04]}}]})
    if request.url.path == "/v2/places":
        features = [
            {"properties": {"place_id": f"m{i}", "name": f"Coral Beach Hotel {i}", "address_line2": "Nyali, Mombasa"}}
            for i in range(9)
        ]
        return httpx.Response(200, json={"features": features})
    return httpx.Response(200, json={})


class TestExternalSearchStep:

    @pytest.fixture
    def online_concierge(self, listings, chat_histories, context_store, llm, monkeypatch):
        def no_sample(limit=6):
            raise AssertionError("broad sample should not run when places has results")

        monkeypatch.setattr(listings, "sample", no_sample)
        external = ExternalHotelSearch(
            places=PlacesClient(api_key="geo-key", base_url="https://geo.test", transport=httpx.MockTransport(coastal_places_handler)),
            images=ImageClient(api_key="")
        )
        return SmartConcierge(listings, chat_histories, context_store=context_store, llm=llm, external_search=external)

    def test_places_results_used_for_unlisted_location(self, online_concierge, nairobi_listing):
        result = run(online_concierge.get_smart_response("hotels in Mombasa", "u1"))

        hotels = result["hotels"]
        assert 0 < len(hotels) <= settings.MAX_HOTEL_RESULTS
        assert all(h["source"] == "geoapify" for h in hotels)
        assert "Sarova Stanley" not in [h["name"] for h in hotels]
        assert hotels[0]["images"] == [settings.PLACEHOLDER_IMAGE_URL]

    def test_listed_location_skips_places(self, online_concierge, nairobi_listing):
        result = run(online_concierge.get_smart_response("hotels in Nairobi", "u1"))
        assert [(h["name"], h["source"]) for h in result["hotels"]] == [("Sarova Stanley", "internal")]


class TestHotelSearchRequest:

    @pytest.mark.parametrize("message, term", [
        ("rooms in Westlands", "Westlands"),
        ("Any rooms near Westlands", "Westlands"),
        ("show me something nearby Kilimani", "me something nearby Kilimani"),
    ])
    def test_search_terms(self, message, term):
        match = HOTEL_SEARCH_REQUEST.search(message)
        assert match.group(2).strip() == term

    def test_words_containing_keywords_do_not_match(self):
        assert HOTEL_SEARCH_REQUEST.search("Is breakfast included?") is None
        assert HOTEL_SEARCH_REQUEST.search("Is the spa inside?") is None

    def test_single_space_after_in_searches_listings(self, concierge, nairobi_listing, westlands_listing):
        result = run(concierge.hotel_reply("rooms in Westlands", build_hotel_context(nairobi_listing), "u1"))
        assert [h["name"] for h in result["hotels"]] == ["Kiboko Inn"]
