# llm/__init__.py
"""
LLM Components Package

Contains LLM-powered components:
- client: OpenAI / Ollama text generation
- prompts: Prompt templates
- intent_parser: Parse traveler messages into a QueryAnalysis
"""

from .client import LLMClient, get_llm_client
from .intent_parser import IntentParser
from .prompts import (
    QUERY_ANALYSIS_PROMPT,
    PREFERENCE_PROMPT,
    TRAVEL_RESPONSE_PROMPT,
    hotel_assistant_system_prompt
)

__all__ = [
    "LLMClient",
    "get_llm_client",
    "IntentParser",
    "QUERY_ANALYSIS_PROMPT",
    "PREFERENCE_PROMPT",
    "TRAVEL_RESPONSE_PROMPT",
    "hotel_assistant_system_prompt"
]
