# api/dependencies.py
"""FastAPI dependencies shared by the routers"""

from fastapi import Depends
from pymongo.database import Database

from ..interfaces import (
    ChatHistoryStore,
    CommissionStore,
    InteractionStore,
    ListingStore,
    get_database
)
from ..services import ImageClient


def get_listing_store(db: Database = Depends(get_database)) -> ListingStore:
    return ListingStore(db)


def get_chat_history_store(db: Database = Depends(get_database)) -> ChatHistoryStore:
    return ChatHistoryStore(db)


def get_interaction_store(db: Database = Depends(get_database)) -> InteractionStore:
    return InteractionStore(db)


def get_commission_store(db: Database = Depends(get_database)) -> CommissionStore:
    return CommissionStore(db)


def get_image_client() -> ImageClient:
    return ImageClient()
