"""
WebSocket API for real-time hotel chat rooms
Travelers and hotel staff share a room per hotel; traveler messages get an
AI assistant reply broadcast to the same room.
"""

import json
from datetime import datetime
from typing import Any, Dict, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from loguru import logger
from pymongo.errors import PyMongoError

from ..agents.concierge import SmartConcierge, build_hotel_context, get_concierge
from ..exceptions import BookifyError, NotFoundError
from ..interfaces import ListingStore
from .dependencies import get_listing_store


router = APIRouter(prefix="/api/chat", tags=["WebSocket"])

AI_USER_ID = "AI_ASSISTANT"


def room_name(hotel_id: str) -> str:
    return f"hotel_{hotel_id}"


class HotelRoomManager:
    """
    Manages WebSocket connections and per-hotel rooms
    """

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        # {room name: set of sockets}
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info(f"WebSocket connected ({len(self.active_connections)} active)")

    def disconnect(self, websocket: WebSocket):
        """Remove a socket from every room; drop rooms left empty"""
        self.active_connections.discard(websocket)
        for name in list(self.rooms):
            self.rooms[name].discard(websocket)
            if not self.rooms[name]:
                del self.rooms[name]
        logger.info(f"WebSocket disconnected ({len(self.active_connections)} active)")

    def join(self, websocket: WebSocket, hotel_id: str):
        self.rooms.setdefault(room_name(hotel_id), set()).add(websocket)
        logger.info(f"Client joined hotel room {hotel_id}")

    def leave(self, websocket: WebSocket, hotel_id: str):
        name = room_name(hotel_id)
        members = self.rooms.get(name)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[name]

    async def send(self, websocket: WebSocket, message: dict):
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.send_json(message)

    async def broadcast(self, hotel_id: str, message: dict):
        """Send a message to every socket in a hotel's room; drop sockets that fail"""
        for websocket in list(self.rooms.get(room_name(hotel_id), set())):
            try:
                await self.send(websocket, message)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning(f"Dropping unreachable socket from hotel room {hotel_id}: {e!r}")
                self.disconnect(websocket)

    def get_connection_count(self) -> int:
        return len(self.active_connections)

    def get_room_count(self) -> int:
        return len(self.rooms)


# Global room manager
manager = HotelRoomManager()


def _load_hotel_context(hotel_id: str, listings: ListingStore) -> Dict[str, Any]:
    try:
        return build_hotel_context(listings.get(hotel_id))
    except NotFoundError:
        logger.warning(f"No listing for hotel room {hotel_id}")
    except PyMongoError as e:
        logger.error(f"Error fetching hotel {hotel_id}: {e}")
    return {"id": hotel_id}


async def handle_send_message(
    websocket: WebSocket,
    data: Dict[str, Any],
    concierge: SmartConcierge,
    listings: ListingStore
):
    hotel_id = str(data.get("hotelId") or "")
    message = data.get("message")
    user_id = data.get("userId")
    is_staff = bool(data.get("isHotelStaff"))
    hotel_context = data.get("hotelContext")

    if isinstance(message, str):
        message = message.strip()
    if not hotel_id or not user_id or not message:
        await manager.send(websocket, {
            "type": "error",
            "message": "hotelId, userId and message are required"
        })
        return
    if not isinstance(message, str):
        await manager.send(websocket, {"type": "error", "message": "message must be a string"})
        return
    if hotel_context is not None and not isinstance(hotel_context, dict):
        await manager.send(websocket, {"type": "error", "message": "hotelContext must be an object"})
        return

    manager.join(websocket, hotel_id)

    await manager.broadcast(hotel_id, {
        "type": "receive_message",
        "hotelId": hotel_id,
        "message": message,
        "userId": user_id,
        "timestamp": datetime.utcnow().isoformat(),
        "isHotelStaff": is_staff
    })

    if is_staff:
        return

    hotel_context = hotel_context or _load_hotel_context(hotel_id, listings)
    reply = await concierge.hotel_reply(message, hotel_context, str(user_id))

    payload = {
        "type": "receive_message",
        "hotelId": hotel_id,
        "message": reply["text"],
        "userId": AI_USER_ID,
        "timestamp": datetime.utcnow().isoformat(),
        "isAI": True
    }
    if reply.get("hotels"):
        payload["hotels"] = reply["hotels"]

    await manager.broadcast(hotel_id, payload)


@router.websocket("/ws")
async def hotel_chat_socket(
    websocket: WebSocket,
    concierge: SmartConcierge = Depends(get_concierge),
    listings: ListingStore = Depends(get_listing_store)
):
    """
    WebSocket endpoint for hotel chat rooms

    Connect: ws://localhost:5000/api/chat/ws

    Send message format:
    {"type": "join_hotel_room", "hotelId": "..."}
    {"type": "leave_hotel_room", "hotelId": "..."}
    {"type": "send_message", "hotelId": "...", "userId": "...", "message": "...",
     "isHotelStaff": false, "hotelContext": {...}}
    {"type": "ping"}

    Receive message format:
    {"type": "connected" | "joined" | "receive_message" | "pong" | "error", ...}
    """
    await manager.connect(websocket)
    await manager.send(websocket, {
        "type": "connected",
        "message": "Connected to AIBookify chat",
        "timestamp": datetime.utcnow().isoformat()
    })

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                await manager.send(websocket, {"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(data, dict):
                await manager.send(websocket, {"type": "error", "message": "Expected a JSON object"})
                continue

            message_type = data.get("type")

            if message_type == "join_hotel_room" and data.get("hotelId"):
                hotel_id = str(data["hotelId"])
                manager.join(websocket, hotel_id)
                await manager.send(websocket, {"type": "joined", "hotelId": hotel_id, "room": room_name(hotel_id)})

            elif message_type == "leave_hotel_room" and data.get("hotelId"):
                manager.leave(websocket, str(data["hotelId"]))

            elif message_type == "send_message":
                try:
                    await handle_send_message(websocket, data, concierge, listings)
                except (BookifyError, PyMongoError) as e:
                    logger.error(f"Error handling message: {e}")
                    await manager.send(websocket, {"type": "error", "message": "Failed to process message"})

            elif message_type == "ping":
                await manager.send(websocket, {"type": "pong", "timestamp": datetime.utcnow().isoformat()})

            else:
                await manager.send(websocket, {"type": "error", "message": f"Unknown message type: {message_type}"})

    except WebSocketDisconnect:
        logger.info("Hotel chat client disconnected")

    except Exception as e:
        logger.error(f"WebSocket error: {e!r}")

    finally:
        manager.disconnect(websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection status

    Returns:
        Connection and room statistics
    """
    return {
        "active_connections": manager.get_connection_count(),
        "rooms": manager.get_room_count(),
        "timestamp": datetime.utcnow().isoformat()
    }
