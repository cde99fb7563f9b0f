# api/dashboard.py
"""
Hotel Dashboard API Endpoint
Overview stats, listings, bookings, commission analytics and revenue.

hotelId query parameters are the hotel manager's id (the listings' ownerId).
Bookings are the commission records of that manager's listings.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from ..exceptions import ConflictError
from ..interfaces import ChatHistoryStore, CommissionStore, ListingStore
from ..interfaces.commission_store import EARNING_STATUSES, months_ago
from ..schemas import BookingCreate, BookingStatusUpdate, TimeRange
from .dependencies import get_chat_history_store, get_commission_store, get_listing_store


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
TREND_WINDOW_DAYS = 30


# ============================================
# Calculations
# ============================================

def _revenue(records: List[Dict[str, Any]]) -> float:
    return round(sum(r.get("bookingValue") or 0 for r in records if r.get("status") in EARNING_STATUSES), 2)


def occupancy_rate(records: List[Dict[str, Any]], listing_count: int) -> int:
    """Percent of listings with an earning booking, capped at 100"""
    if listing_count <= 0:
        return 0
    occupied = len([r for r in records if r.get("status") in EARNING_STATUSES])
    return round(min(100.0, occupied / listing_count * 100))


def percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def weekly_performance(records: List[Dict[str, Any]], now: datetime) -> List[Dict[str, Any]]:
    """Bookings and revenue per weekday (Mon..Sun) over the last 7 days"""
    week = {day: {"day": day, "bookings": 0, "revenue": 0.0} for day in WEEKDAYS}
    since = now - timedelta(days=7)

    for record in records:
        created = record.get("createdAt")
        if not isinstance(created, datetime) or created < since:
            continue
        bucket = week[WEEKDAYS[created.weekday()]]
        bucket["bookings"] += 1
        if record.get("status") in EARNING_STATUSES:
            bucket["revenue"] = round(bucket["revenue"] + (record.get("bookingValue") or 0), 2)

    return [week[day] for day in WEEKDAYS]


def build_overview(
    records: List[Dict[str, Any]],
    listing_count: int,
    new_messages: int,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Dashboard overview from raw booking records

    Args:
        records: commission records with datetime createdAt
        listing_count: number of the manager's listings
        new_messages: conversations active in the last 24h
        now: reference time (defaults to utcnow)
    """
    now = now or datetime.utcnow()
    current_start = now - timedelta(days=TREND_WINDOW_DAYS)
    previous_start = now - timedelta(days=2 * TREND_WINDOW_DAYS)

    current = [r for r in records if isinstance(r.get("createdAt"), datetime) and r["createdAt"] >= current_start]
    previous = [r for r in records if isinstance(r.get("createdAt"), datetime)
                and previous_start <= r["createdAt"] < current_start]

    return {
        "stats": {
            "totalBookings": len(records),
            "totalRevenue": _revenue(records),
            "occupancyRate": occupancy_rate(records, listing_count),
            "newMessages": new_messages,
        },
        "weeklyPerformance": weekly_performance(records, now),
        "trends": {
            "bookingsChange": percent_change(len(current), len(previous)),
            "revenueChange": percent_change(_revenue(current), _revenue(previous)),
            "occupancyChange": percent_change(
                occupancy_rate(current, listing_count),
                occupancy_rate(previous, listing_count)
            ),
        },
    }


def monthly_revenue(records: List[Dict[str, Any]], months: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Revenue of confirmed/completed bookings per calendar month, oldest first"""
    now = now or datetime.utcnow()
    buckets = []
    for offset in range(months - 1, -1, -1):
        moment = months_ago(now, offset)
        buckets.append({"month": MONTH_NAMES[moment.month - 1], "year": moment.year, "revenue": 0.0})

    index = {(b["year"], MONTH_NAMES.index(b["month"]) + 1): b for b in buckets}
    for record in records:
        created = record.get("createdAt")
        if record.get("status") not in EARNING_STATUSES or not isinstance(created, datetime):
            continue
        bucket = index.get((created.year, created.month))
        if bucket:
            bucket["revenue"] = round(bucket["revenue"] + (record.get("bookingValue") or 0), 2)

    return buckets


def _hotel_ids(hotel_id: Optional[str], listings: ListingStore) -> Optional[List[str]]:
    """Booking hotelIds belonging to a manager: their listing ids plus the manager id itself"""
    if not hotel_id:
        return None
    return listings.ids_for_owner(hotel_id) + [hotel_id]


# ============================================
# Endpoints
# ============================================

@router.get("/overview")
async def get_overview(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    listings: ListingStore = Depends(get_listing_store),
    commissions: CommissionStore = Depends(get_commission_store),
    chats: ChatHistoryStore = Depends(get_chat_history_store)
):
    now = datetime.utcnow()
    hotel_ids = _hotel_ids(hotel_id, listings)
    owned = listings.list_by_owner(hotel_id) if hotel_id else listings.list_active()

    records = commissions.raw_bookings(hotel_ids)
    new_messages = chats.count_active(hotel_ids, now - timedelta(hours=24))

    return build_overview(records, len(owned), new_messages, now)


@router.get("/commissions")
async def get_commissions(
    time_range: TimeRange = Query("month", alias="timeRange"),
    commissions: CommissionStore = Depends(get_commission_store)
):
    return commissions.get_analytics(time_range)


@router.get("/top-sources")
async def get_top_sources(
    limit: int = Query(5, ge=1, le=50),
    commissions: CommissionStore = Depends(get_commission_store)
):
    return commissions.get_top_sources(limit)


@router.get("/listings")
async def get_dashboard_listings(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    listings: ListingStore = Depends(get_listing_store)
) -> List[Dict[str, Any]]:
    """Manager's listings in the dashboard card format"""
    docs = listings.list_by_owner(hotel_id) if hotel_id else listings.list_active()
    return [
        {
            "id": doc["id"],
            "name": doc.get("name"),
            "price": doc.get("price"),
            "photos": doc.get("images") or [],
            "amenities": doc.get("amenities") or [],
            "isActive": doc.get("isActive"),
            "location": doc.get("location"),
            "socialMediaLink": doc.get("socialMediaLink"),
            "whatsappNumber": doc.get("whatsappNumber"),
            "rating": doc.get("rating") or 0,
        }
        for doc in docs
    ]


@router.get("/bookings")
async def get_bookings(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    status: Optional[str] = Query(None, pattern="^(pending|confirmed|cancelled|completed)$"),
    listings: ListingStore = Depends(get_listing_store),
    commissions: CommissionStore = Depends(get_commission_store)
):
    return commissions.list_bookings(_hotel_ids(hotel_id, listings), status)


@router.post("/bookings", status_code=201)
async def track_booking(
    body: BookingCreate,
    commissions: CommissionStore = Depends(get_commission_store)
):
    """Record a booking and the commission it earns"""
    try:
        return commissions.track_booking(body.model_dump())
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.patch("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    commissions: CommissionStore = Depends(get_commission_store)
):
    updated = commissions.update_booking_status(booking_id, body.status)
    if updated is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    logger.info(f"Booking {booking_id} -> {body.status}")
    return updated


@router.get("/revenue")
async def get_revenue(
    months: int = Query(6, ge=1, le=24),
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    listings: ListingStore = Depends(get_listing_store),
    commissions: CommissionStore = Depends(get_commission_store)
):
    now = datetime.utcnow()
    since = months_ago(now, months).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    records = commissions.raw_bookings(_hotel_ids(hotel_id, listings), since)
    return monthly_revenue(records, months, now)
