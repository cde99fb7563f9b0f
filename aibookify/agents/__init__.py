"""
AI Agents Module
Conversational agents for the traveler chat
"""

from .concierge import SmartConcierge, build_hotel_context, fallback_reply, get_concierge

__all__ = [
    "SmartConcierge",
    "build_hotel_context",
    "fallback_reply",
    "get_concierge"
]
