"""REST API tests through FastAPI's TestClient."""

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from aibookify.api.dependencies import get_listing_store
from aibookify.main import app

from .conftest import FakeLLM


DEFAULT_REPLY = "I found some lovely places for you to consider."


class TestServiceRoutes:

    def test_root(self, client):
        data = client.get("/").json()
        assert data["service"] == "AIBookify Backend"
        assert "/api/health" in data["endpoints"]

    def test_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["components"]["mongodb"] == "connected"
        assert data["components"]["context_store"] == "memory"
        assert data["components"]["images"] == "not configured"
        assert data["components"]["llm"]["provider"] in ("openai", "ollama")

    def test_unknown_route(self, client):
        assert client.get("/api/nope").status_code == 404

    def test_database_errors_are_reported(self, client):
        class BrokenStore:
            def list_active(self):
                raise ServerSelectionTimeoutError("no servers")

        app.dependency_overrides[get_listing_store] = lambda: BrokenStore()
        response = client.get("/api/listings/")

        assert response.status_code == 500
        assert response.json()["detail"] == "Database error occurred"


class TestListingsApi:

    def test_crud_flow(self, client):
        created = client.post("/api/listings/add", json={
            "name": "Sarova Stanley",
            "location": "Nairobi",
            "price": 180,
            "ownerId": "owner-1",
            "amenities": "wifi",
            "socialMediaLink": "https://instagram.com/stanley",
        })
        assert created.status_code == 201
        listing = created.json()
        assert listing["amenities"] == ["wifi"]
        assert listing["images"] == []
        assert listing["socialMediaLink"] == "https://instagram.com/stanley"

        listing_id = listing["id"]
        assert [item["id"] for item in client.get("/api/listings/").json()] == [listing_id]
        assert client.get(f"/api/listings/{listing_id}").json()["name"] == "Sarova Stanley"

        edited = client.put(f"/api/listings/edit/{listing_id}", json={"price": 150, "isActive": False})
        assert edited.status_code == 200
        assert edited.json()["price"] == 150
        assert edited.json()["isActive"] is False
        assert edited.json()["name"] == "Sarova Stanley"

        deleted = client.delete(f"/api/listings/delete/{listing_id}")
        assert deleted.json() == {"message": "Listing deleted successfully"}
        assert client.delete(f"/api/listings/delete/{listing_id}").status_code == 404

    def test_missing_required_fields(self, client):
        response = client.post("/api/listings/add", json={"name": "Nowhere"})
        assert response.status_code == 400
        assert "Missing required fields" in response.json()["detail"]

    def test_unknown_listing(self, client):
        assert client.get("/api/listings/65a1b2c3d4e5f6a7b8c9d0e1").status_code == 404
        assert client.put("/api/listings/edit/bad-id", json={"price": 1}).status_code == 404


class TestChatApi:

    def test_smart_chat_requires_message(self, client):
        response = client.post("/api/chat/smart-chat", json={"message": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Message is required"

    def test_smart_chat_greeting(self, client):
        response = client.post("/api/chat/smart-chat", json={"message": "hello", "userId": "u1"})
        assert response.status_code == 200
        assert response.json() == {"response": DEFAULT_REPLY, "hotels": []}

        history = client.get("/api/chat/smart-chat/history", params={"userId": "u1"}).json()
        assert len(history["messages"]) == 2

    def test_smart_chat_search(self, client, nairobi_listing):
        data = client.post("/api/chat/smart-chat", json={"message": "hotels in Nairobi"}).json()

        assert len(data["hotels"]) == 1
        hotel = data["hotels"][0]
        assert hotel["id"] == nairobi_listing["id"]
        assert hotel["images"] == ["https://example.com/stanley.jpg"]
        assert hotel["source"] == "internal"

        guest = client.get("/api/chat/smart-chat/history", params={"userId": "guest-user"}).json()
        assert len(guest["messages"]) == 2

    def test_generate_response_with_hotel_id(self, client, nairobi_listing):
        response = client.post("/api/chat/generate-response", json={
            "message": "Is breakfast included?",
            "userId": "u1",
            "hotelId": nairobi_listing["id"],
        })
        assert response.status_code == 200
        assert response.json() == {"text": DEFAULT_REPLY}

        history = client.get(f"/api/chat/{nairobi_listing['id']}/history", params={"userId": "u1"}).json()
        assert [m["isAI"] for m in history["messages"]] == [False, True]
        assert [m["sender"] for m in history["messages"]] == ["u1", "AI"]
        assert history["hotelId"] == nairobi_listing["id"]

        all_histories = client.get(f"/api/chat/{nairobi_listing['id']}/all-histories").json()
        assert [h["userId"] for h in all_histories] == ["u1"]

    def test_generate_response_with_context_and_search(self, client, westlands_listing):
        response = client.post("/api/chat/generate-response", json={
            "message": "Any rooms near Westlands?",
            "userId": "u1",
            "hotelContext": {"id": "h-ctx", "name": "Context Hotel"},
        })
        data = response.json()
        assert data["text"] == DEFAULT_REPLY
        assert [h["name"] for h in data["hotels"]] == ["Kiboko Inn"]

    def test_generate_response_errors(self, client):
        assert client.post("/api/chat/generate-response", json={"message": "hi", "userId": "u1"}).status_code == 400
        assert client.post("/api/chat/generate-response", json={
            "message": "hi", "userId": "u1", "hotelId": "65a1b2c3d4e5f6a7b8c9d0e1"
        }).status_code == 404
        assert client.post("/api/chat/generate-response", json={"message": "", "userId": "u1"}).status_code == 422

    def test_history_requires_user(self, client):
        assert client.get("/api/chat/h1/history").status_code == 422
        assert client.get("/api/chat/h1/history", params={"userId": "nobody"}).json() == {
            "id": None,
            "hotelId": "h1",
            "userId": "nobody",
            "messages": [],
            "createdAt": None,
            "updatedAt": None,
        }

    def test_log_interaction(self, client):
        response = client.post("/api/chat/interactions", json={
            "userId": "u1", "action": "click", "hotelId": "h1", "metadata": {"position": 2}
        })
        data = response.json()
        assert data["message"] == "Interaction logged"
        assert data["interaction"]["metadata"] == {"position": 2}


class TestChatApiWithFailingModel:

    @pytest.fixture
    def llm(self):
        return FakeLLM(reply=RuntimeError("unexpected"))

    def test_smart_chat_degrades_to_greeting(self, client):
        data = client.post("/api/chat/smart-chat", json={"message": "hotels in Nairobi"}).json()
        assert data["hotels"] == []
        assert data["response"].startswith("I'm your dedicated travel expert")
