# api/__init__.py
"""
API Endpoints Package

Contains all FastAPI routers for the backend:
- listings: Listing CRUD
- chat: Smart chat, hotel assistant, histories, interactions
- dashboard: Hotel manager stats, bookings and commissions
- websocket: Real-time hotel chat rooms
"""

from typing import TYPE_CHECKING

# Lazy imports to avoid circular dependencies
if TYPE_CHECKING:
    from .listings import router as listings_router
    from .chat import router as chat_router
    from .dashboard import router as dashboard_router
    from .websocket import router as websocket_router, manager as room_manager

__all__ = [
    "listings_router",
    "chat_router",
    "dashboard_router",
    "websocket_router",
    "room_manager"
]
