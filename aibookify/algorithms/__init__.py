"""
AI Algorithms Module
Core algorithm for hotel ranking
"""

from .hotel_ranker import (
    budget_score,
    score_hotel,
    rank_hotels,
    dedupe_hotels,
    to_hotel_result,
    HotelScoreBreakdown
)

__all__ = [
    "budget_score",
    "score_hotel",
    "rank_hotels",
    "dedupe_hotels",
    "to_hotel_result",
    "HotelScoreBreakdown"
]
