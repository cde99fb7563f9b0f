# interfaces/commission_store.py
"""
Commission Tracking Store
Bookings made through AIBookify (internal or via OTA partners) and the
commission each one earns. Also the source of dashboard booking stats.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from loguru import logger
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..exceptions import ConflictError, ValidationFailedError
from .database import serialize_doc


EARNING_STATUSES = ["confirmed", "completed"]
TIME_RANGES = ("week", "month", "year")

EMPTY_SUMMARY = {
    "totalCommissionEarned": 0,
    "totalBookings": 0,
    "totalBookingValue": 0,
    "externalBookings": 0,
    "internalBookings": 0
}


def months_ago(moment: datetime, months: int) -> datetime:
    """Same day-of-month N calendar months earlier (clamped to month length)"""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    next_month = datetime(year + (month == 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def window_start(time_range: str, now: Optional[datetime] = None) -> datetime:
    """Start of a week / month / year analytics window ending now"""
    now = now or datetime.utcnow()
    if time_range == "week":
        return now - timedelta(days=7)
    if time_range == "month":
        return months_ago(now, 1)
    if time_range == "year":
        return months_ago(now, 12)
    raise ValidationFailedError(f"Unknown time range: {time_range}")


class CommissionStore:
    """Commission records in the commission_tracking collection"""

    def __init__(self, db: Database):
        self.collection = db["commission_tracking"]

    def track_booking(self, booking: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a new booking with status pending.

        Args:
            booking: snake_case fields of BookingCreate

        Returns:
            dict: The stored record

        Raises:
            ConflictError: bookingId already tracked
        """
        now = datetime.utcnow()
        commission_earned = round(booking["booking_value"] * booking["commission_rate"], 2)

        doc = {
            "bookingId": booking["booking_id"],
            "hotelId": booking["hotel_id"],
            "hotelName": booking["hotel_name"],
            "source": booking["source"],
            "isExternal": booking["is_external"],
            "guestDetails": dict(booking["guest_details"]),
            "bookingValue": booking["booking_value"],
            "currency": booking.get("currency") or "USD",
            "commissionRate": booking["commission_rate"],
            "commissionEarned": commission_earned,
            "bookingDate": now,
            "checkInDate": booking["check_in_date"],
            "checkOutDate": booking["check_out_date"],
            "status": "pending",
            "paymentStatus": "pending",
            "createdAt": now,
            "updatedAt": now
        }
        for key, field in (("external_booking_reference", "externalBookingReference"), ("notes", "notes")):
            if booking.get(key):
                doc[field] = booking[key]

        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"Booking already tracked: {booking['booking_id']}") from e

        doc["_id"] = result.inserted_id
        logger.info(f"Commission tracked: ${commission_earned:.2f} from {doc['source']}")
        return serialize_doc(doc)

    def get_analytics(self, time_range: str = "month", now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Commission analytics for confirmed/completed bookings in the window.

        Returns:
            dict: {"bySource": [...], "summary": {...}}
        """
        match = {
            "$match": {
                "createdAt": {"$gte": window_start(time_range, now)},
                "status": {"$in": EARNING_STATUSES}
            }
        }

        by_source = list(self.collection.aggregate([
            match,
            {
                "$group": {
                    "_id": "$source",
                    "totalCommission": {"$sum": "$commissionEarned"},
                    "totalBookings": {"$sum": 1},
                    "avgCommissionPerBooking": {"$avg": "$commissionEarned"},
                    "totalBookingValue": {"$sum": "$bookingValue"}
                }
            },
            {"$sort": {"totalCommission": -1}}
        ]))

        summary = list(self.collection.aggregate([
            match,
            {
                "$group": {
                    "_id": None,
                    "totalCommissionEarned": {"$sum": "$commissionEarned"},
                    "totalBookings": {"$sum": 1},
                    "totalBookingValue": {"$sum": "$bookingValue"},
                    "externalBookings": {"$sum": {"$cond": [{"$eq": ["$isExternal", True]}, 1, 0]}},
                    "internalBookings": {"$sum": {"$cond": [{"$eq": ["$isExternal", False]}, 1, 0]}}
                }
            }
        ]))

        if summary:
            summary_doc = {k: v for k, v in summary[0].items() if k != "_id"}
        else:
            summary_doc = dict(EMPTY_SUMMARY)

        return {"bySource": by_source, "summary": summary_doc}

    def update_booking_status(self, booking_id: str, status: str) -> Optional[Dict[str, Any]]:
        """Set the booking status; None when the booking is unknown"""
        updated = self.collection.find_one_and_update(
            {"bookingId": booking_id},
            {"$set": {"status": status, "updatedAt": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if updated and status == "completed":
            logger.info(f"Booking {booking_id} completed - commission earned")
        return serialize_doc(updated)

    def get_top_sources(self, limit: int = 5) -> List[Dict[str, Any]]:
        return list(self.collection.aggregate([
            {"$match": {"status": {"$in": EARNING_STATUSES}}},
            {
                "$group": {
                    "_id": "$source",
                    "totalRevenue": {"$sum": "$commissionEarned"},
                    "bookingCount": {"$sum": 1},
                    "avgCommission": {"$avg": "$commissionEarned"}
                }
            },
            {"$sort": {"totalRevenue": -1}},
            {"$limit": limit}
        ]))

    def list_bookings(self, hotel_ids: Optional[List[str]] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Booking records, newest first.

        Args:
            hotel_ids: restrict to these hotels (None = all)
            status: restrict to one status
        """
        query: Dict[str, Any] = {}
        if hotel_ids is not None:
            query["hotelId"] = {"$in": hotel_ids}
        if status:
            query["status"] = status
        return [serialize_doc(d) for d in self.collection.find(query).sort("createdAt", DESCENDING)]

    def raw_bookings(self, hotel_ids: Optional[List[str]], since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Unserialized records (datetimes kept), optionally created since a moment"""
        query: Dict[str, Any] = {}
        if since is not None:
            query["createdAt"] = {"$gte": since}
        if hotel_ids is not None:
            query["hotelId"] = {"$in": hotel_ids}
        return list(self.collection.find(query))
