"""
AIBookify Backend Package

Hotel booking platform backend with:
- Conversational hotel discovery (Smart Concierge)
- Per-hotel AI assistant and real-time staff chat rooms
- Listing management for hotel managers
- Commission and booking analytics for the dashboard
"""

__version__ = "1.0.0"

# Package structure:
# aibookify/
# ├── __init__.py           <- This file
# ├── main.py               <- FastAPI application entry
# ├── config.py             <- Configuration settings
# ├── exceptions.py         <- Error hierarchy
# │
# ├── agents/
# │   └── concierge.py      <- Chat pipeline (analyze -> search -> rank -> respond)
# │
# ├── api/                  <- FastAPI Routers
# │   ├── dependencies.py   <- Depends() providers
# │   ├── chat.py           <- /api/chat
# │   ├── listings.py       <- /api/listings
# │   ├── dashboard.py      <- /api/dashboard
# │   └── websocket.py      <- WS /api/chat/ws (hotel rooms)
# │
# ├── interfaces/           <- Data Stores
# │   ├── database.py       <- MongoDB connection + indexes
# │   ├── context_store.py  <- Short-lived per-user memory (Redis / memory)
# │   ├── listing_store.py
# │   ├── chat_history_store.py
# │   ├── interaction_store.py
# │   └── commission_store.py
# │
# ├── llm/                  <- LLM Components
# │   ├── client.py         <- OpenAI / Ollama
# │   ├── prompts.py        <- Prompt templates
# │   └── intent_parser.py  <- Query analysis + entity extraction
# │
# ├── algorithms/
# │   └── hotel_ranker.py   <- Ranking heuristic
# │
# ├── services/             <- Third-party APIs
# │   ├── places_client.py  <- Geoapify
# │   ├── image_client.py   <- Pexels
# │   └── external_hotels.py
# │
# ├── schemas/
# │   └── booking_schemas.py
# │
# └── utils/
#     └── ai_helpers.py
