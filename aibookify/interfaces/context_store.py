# interfaces/context_store.py
"""
Conversation Memory for the Smart Concierge
Keeps recent turns, inferred preferences and emotional state per traveler.
Stored in Redis with a TTL; falls back to process memory when Redis is down.
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import redis
from loguru import logger

from ..config import settings
from ..llm.prompts import PREFERENCE_PROMPT
from ..utils import safe_parse_json, unique


# LLM keys -> stored preference keys
PREFERENCE_KEYS = {
    "budget": "budget",
    "travelStyle": "travel_style",
    "favoriteAmenities": "favorite_amenities",
}

MAX_PREVIOUS_SEARCHES = 5


class ContextStore:
    """
    Short-lived per-user conversation context.

    Context layout:
        {
            "user_id": str,
            "messages": [{"role": "user"|"assistant", "content": str, "timestamp": iso}],
            "preferences": {"budget", "travel_style", "favorite_amenities", "previous_searches"},
            "last_emotion", "last_intent", "last_purpose": Optional[str],
            "last_updated": iso
        }
    """

    def __init__(
        self,
        use_redis: Optional[bool] = None,
        redis_client: Optional[redis.Redis] = None,
        ttl_hours: Optional[int] = None,
        max_messages: Optional[int] = None
    ):
        self.ttl_seconds = (ttl_hours or settings.CONTEXT_TTL_HOURS) * 3600
        self.max_messages = max_messages or settings.CONTEXT_MAX_MESSAGES
        self.redis_client = redis_client
        self._memory_store: Dict[str, Dict[str, Any]] = {}

        if use_redis is None:
            use_redis = settings.USE_REDIS

        if self.redis_client is None and use_redis:
            try:
                self.redis_client = redis.Redis(
                    host=settings.REDIS_HOST,
                    port=settings.REDIS_PORT,
                    db=settings.REDIS_DB,
                    decode_responses=True,
                    socket_connect_timeout=2
                )
                self.redis_client.ping()
                logger.info(f"ContextStore connected to Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}")
            except redis.RedisError as e:
                logger.warning(f"Redis connection failed, using in-memory context store: {e}")
                self.redis_client = None

    @property
    def backend(self) -> str:
        return "redis" if self.redis_client else "memory"

    def _get_key(self, user_id: str) -> str:
        return f"context:{user_id}"

    # ============================================
    # Storage
    # ============================================

    def _load(self, user_id: str) -> Optional[Dict[str, Any]]:
        if self.redis_client:
            try:
                data = self.redis_client.get(self._get_key(user_id))
                if data:
                    return json.loads(data)
            except redis.RedisError as e:
                logger.error(f"Redis get error: {e}")

        return self._memory_store.get(user_id)

    def _save(self, user_id: str, context: Dict[str, Any]):
        context["last_updated"] = datetime.utcnow().isoformat()

        if self.redis_client:
            try:
                self.redis_client.setex(self._get_key(user_id), self.ttl_seconds, json.dumps(context))
                return
            except redis.RedisError as e:
                logger.error(f"Redis save error: {e}")

        self._memory_store[user_id] = context

    def _new_context(self, user_id: str) -> Dict[str, Any]:
        return {
            "user_id": user_id,
            "messages": [],
            "preferences": {},
            "last_emotion": None,
            "last_intent": None,
            "last_purpose": None,
            "last_updated": datetime.utcnow().isoformat()
        }

    # ============================================
    # Messages
    # ============================================

    def save_user_message(self, user_id: str, message: str):
        """Append a traveler message, creating the context if needed"""
        context = self._load(user_id) or self._new_context(user_id)
        self._append(context, "user", message)
        self._save(user_id, context)

    def save_ai_message(self, user_id: str, message: str):
        """Append an assistant message. Does nothing for unknown users."""
        context = self._load(user_id)
        if not context:
            return
        self._append(context, "assistant", message)
        self._save(user_id, context)

    def _append(self, context: Dict[str, Any], role: str, content: str):
        context["messages"].append({
            "role": role,
            "content": content,
            "timestamp": datetime.utcnow().isoformat()
        })
        context["messages"] = context["messages"][-self.max_messages:]

    def get_messages(self, user_id: str):
        context = self._load(user_id)
        return list(context["messages"]) if context else []

    def get_conversation_history(self, user_id: str) -> str:
        """
        Last 4 messages as prompt lines.

        Returns:
            str: "Traveler: ..." / "You: ..." lines, or "" when empty
        """
        context = self._load(user_id)
        if not context or not context["messages"]:
            return ""

        return "\n".join(
            f"{'Traveler' if msg['role'] == 'user' else 'You'}: {msg['content']}"
            for msg in context["messages"][-4:]
        )

    # ============================================
    # Preferences & state
    # ============================================

    async def update_preferences(self, user_id: str, query: str, llm) -> None:
        """
        Ask the LLM to update preference memory from a new message.
        Failures are logged and ignored.
        """
        context = self._load(user_id)
        if not context:
            return

        current_memory = json.dumps({
            "preferences": context["preferences"],
            "lastEmotion": context.get("last_emotion"),
            "lastIntent": context.get("last_intent"),
            "lastPurpose": context.get("last_purpose")
        })

        try:
            raw = await llm.generate(
                PREFERENCE_PROMPT.format(user_query=query, current_memory=current_memory),
                temperature=0.2,
                max_tokens=300
            )
        except Exception as e:
            logger.warning(f"Preference update skipped for {user_id}: {e}")
            return

        parsed = safe_parse_json(raw)
        if not parsed:
            logger.info("Could not extract preferences")
            return

        self._merge(context, parsed)
        self._save(user_id, context)

    def _merge(self, context: Dict[str, Any], parsed: Dict[str, Any]):
        prefs = parsed.get("preferences")
        if isinstance(prefs, dict):
            for llm_key, key in PREFERENCE_KEYS.items():
                value = prefs.get(llm_key)
                if key == "favorite_amenities":
                    if isinstance(value, list):
                        amenities = [a for a in value if isinstance(a, str) and _known(a)]
                        if amenities:
                            existing = context["preferences"].get(key, [])
                            context["preferences"][key] = unique(existing + amenities)
                elif _known(value):
                    context["preferences"][key] = value

        for llm_key, key in (("emotion", "last_emotion"), ("intent", "last_intent"), ("travelPurpose", "last_purpose")):
            if _known(parsed.get(llm_key)):
                context[key] = parsed[llm_key]

    def record_search(self, user_id: str, location: str):
        """Remember a searched location in preferences.previous_searches"""
        context = self._load(user_id)
        if not context or not location:
            return
        searches = context["preferences"].get("previous_searches", [])
        searches = unique([location] + searches)[:MAX_PREVIOUS_SEARCHES]
        context["preferences"]["previous_searches"] = searches
        self._save(user_id, context)

    def get_user_preferences(self, user_id: str) -> str:
        """Preference summary for prompts, or "" when nothing is known"""
        context = self._load(user_id)
        if not context or not context["preferences"]:
            return ""

        return (
            f"User Preferences: {json.dumps(context['preferences'], indent=2)} | "
            f"Emotion: {context.get('last_emotion') or 'unknown'} | "
            f"Intent: {context.get('last_intent') or 'unknown'} | "
            f"Purpose: {context.get('last_purpose') or 'unknown'}"
        )

    def get_state(self, user_id: str) -> Dict[str, Optional[str]]:
        context = self._load(user_id)
        if not context:
            return {}
        return {
            "last_emotion": context.get("last_emotion"),
            "last_intent": context.get("last_intent"),
            "last_purpose": context.get("last_purpose")
        }

    # ============================================
    # Cleanup
    # ============================================

    def clear(self, user_id: str):
        """Forget a user's context"""
        if self.redis_client:
            try:
                self.redis_client.delete(self._get_key(user_id))
            except redis.RedisError as e:
                logger.error(f"Redis delete error: {e}")
        self._memory_store.pop(user_id, None)

    def cleanup_old_contexts(self, now: Optional[datetime] = None) -> int:
        """
        Drop in-memory contexts idle for longer than the TTL.
        Redis entries expire on their own.

        Returns:
            int: Number of contexts removed
        """
        now = now or datetime.utcnow()
        max_age = timedelta(seconds=self.ttl_seconds)

        stale = [
            user_id for user_id, ctx in self._memory_store.items()
            if now - datetime.fromisoformat(ctx["last_updated"]) > max_age
        ]
        for user_id in stale:
            del self._memory_store[user_id]

        if stale:
            logger.info(f"Cleaned up {len(stale)} idle conversation contexts")
        return len(stale)


def _known(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip()) and value.strip().lower() != "unknown"


# ============================================
# Global Instance
# ============================================

_context_store: Optional[ContextStore] = None


def get_context_store() -> ContextStore:
    """Get or create the global context store"""
    global _context_store
    if _context_store is None:
        _context_store = ContextStore()
    return _context_store
