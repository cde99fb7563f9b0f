"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List, Optional, Union

import mongomock
import pytest
from fastapi.testclient import TestClient

from aibookify.agents.concierge import SmartConcierge, get_concierge
from aibookify.api.dependencies import get_image_client
from aibookify.exceptions import LLMError
from aibookify.interfaces import (
    ChatHistoryStore,
    CommissionStore,
    ContextStore,
    ListingStore,
    ensure_indexes,
    get_context_store,
    get_database,
)
from aibookify.main import app
from aibookify.services import ExternalHotelSearch, ImageClient, PlacesClient


Scripted = Union[str, Exception]

ANALYSIS_MARKER = "elite AI travel analyst"
PREFERENCE_MARKER = "update structured preference"


class FakeLLM:
    """
    Scripted stand-in for LLMClient.

    Prompts are routed by kind (query analysis, preference memory, anything
    else). Each scripted answer is either the text to return or an
    exception to raise.
    """

    provider = "fake"
    model = "fake-model"

    def __init__(
        self,
        reply: Scripted = "I found some lovely places for you to consider.",
        analysis: Scripted = LLMError("analysis disabled"),
        preferences: Scripted = "{}"
    ):
        self.reply = reply
        self.analysis = analysis
        self.preferences = preferences
        self.calls: List[Dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "history": history,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if ANALYSIS_MARKER in prompt:
            answer = self.analysis
        elif PREFERENCE_MARKER in prompt:
            answer = self.preferences
        else:
            answer = self.reply
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_with(self, marker: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if marker in c["prompt"]]


@pytest.fixture
def db():
    """In-memory MongoDB database with the application indexes."""
    database = mongomock.MongoClient()["aibookify_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def listings(db) -> ListingStore:
    return ListingStore(db)


@pytest.fixture
def chat_histories(db) -> ChatHistoryStore:
    return ChatHistoryStore(db)


@pytest.fixture
def commissions(db) -> CommissionStore:
    return CommissionStore(db)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def context_store() -> ContextStore:
    """Context store that never touches Redis."""
    return ContextStore(use_redis=False)


@pytest.fixture
def offline_external_search() -> ExternalHotelSearch:
    """External search with no Geoapify or Pexels keys."""
    return ExternalHotelSearch(places=PlacesClient(api_key=""), images=ImageClient(api_key=""))


@pytest.fixture
def concierge(listings, chat_histories, context_store, llm, offline_external_search) -> SmartConcierge:
    return SmartConcierge(
        listings,
        chat_histories,
        context_store=context_store,
        llm=llm,
        external_search=offline_external_search
    )


@pytest.fixture
def client(db, concierge):
    """TestClient wired to the mongomock database and the scripted concierge."""
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_concierge] = lambda: concierge
    app.dependency_overrides[get_context_store] = lambda: concierge.context
    app.dependency_overrides[get_image_client] = lambda: ImageClient(api_key="")
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def nairobi_listing(listings) -> Dict[str, Any]:
    return listings.create({
        "name": "Sarova Stanley",
        "location": "Nairobi CBD",
        "price": 180,
        "owner_id": "owner-1",
        "amenities": ["pool", "wifi", "spa"],
        "images": ["https://example.com/stanley.jpg"],
        "rating": 4.5,
    })


@pytest.fixture
def westlands_listing(listings) -> Dict[str, Any]:
    return listings.create({
        "name": "Kiboko Inn",
        "location": "Westlands, Nairobi",
        "price": 70,
        "owner_id": "owner-1",
        "amenities": "wifi",
    })
