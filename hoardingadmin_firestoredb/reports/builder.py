import asyncio
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..firestore.bookings import BookingSystem
from ..firestore.hoardings import FirestoreHoardingsDB
from ..schemas.booking import Booking, BookingStatus, PaymentStatus
from ..schemas.hoarding import Hoarding
from ..schemas.report import BookingTrend, LocationPerformance, MonthlyRevenue, ReportData, StatusSlice
from ..utils.booking_filters import CalendarFilterCriteria, filter_calendar_bookings
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_it import time_it
from ..utils.time_now import TimeManager

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
EMPTY_REVENUE_MONTHS = 6
TOP_LOCATIONS = 5
TREND_WEEKS = 4
UNKNOWN_LOCATION = "Unknown"

STATUS_COLORS = {
    BookingStatus.PENDING.value: "#fbbf24",
    BookingStatus.APPROVED.value: "#10b981",
    BookingStatus.REJECTED.value: "#ef4444",
}


def _is_paid(booking: Booking) -> bool:
    return PaymentStatus.normalize(booking.payment_status) == PaymentStatus.PAID.value


def monthly_revenue(bookings: Iterable[Booking], now: Optional[datetime] = None) -> List[MonthlyRevenue]:
    """
    Paid bookings grouped by the month they were created in, calendar order.
    Months of different years share a bucket. Without any paid booking the
    six months up to the current one are returned with zero revenue.
    """
    buckets: Dict[int, MonthlyRevenue] = {}
    for booking in bookings:
        created = TimeManager.to_business_time(booking.created_at)
        if not _is_paid(booking) or created is None:
            continue
        index = created.month - 1
        bucket = buckets.setdefault(index, MonthlyRevenue(month=MONTH_NAMES[index]))
        bucket.revenue += booking.amount or 0
        bucket.bookings += 1

    if buckets:
        return [buckets[index] for index in sorted(buckets)]

    current = TimeManager.to_business_time(now or TimeManager.get_utc_now()).month - 1
    return [MonthlyRevenue(month=MONTH_NAMES[index]) for index in range(max(0, current - (EMPTY_REVENUE_MONTHS - 1)), current + 1)]


def location_performance(hoardings: Iterable[Hoarding], bookings: Iterable[Booking]) -> List[LocationPerformance]:
    """Hoarding count and paid revenue per location, the five best earning locations."""
    locations: Dict[str, LocationPerformance] = {}
    location_of: Dict[str, str] = {}
    for hoarding in hoardings:
        location = hoarding.location or UNKNOWN_LOCATION
        location_of[hoarding.id] = location
        locations.setdefault(location, LocationPerformance(location=location)).hoardings += 1

    for booking in bookings:
        location = location_of.get(booking.hoarding_id or "")
        if location is not None and _is_paid(booking):
            locations[location].revenue += booking.amount or 0

    return sorted(locations.values(), key=lambda item: item.revenue, reverse=True)[:TOP_LOCATIONS]


def booking_trends(bookings: Iterable[Booking], now: Optional[datetime] = None) -> List[BookingTrend]:
    """Bookings created in each of the last four seven-day windows, oldest first."""
    now = now or TimeManager.get_utc_now()
    created = [booking.created_at for booking in bookings if booking.created_at is not None]

    trends = []
    for weeks_back in range(TREND_WEEKS - 1, -1, -1):
        week_end = now - timedelta(days=weeks_back * 7)
        week_start = week_end - timedelta(days=6)
        count = sum(1 for timestamp in created if week_start <= timestamp <= week_end)
        trends.append(BookingTrend(week=f"Week {TREND_WEEKS - weeks_back}", bookings=count))
    return trends


def status_distribution(bookings: Iterable[Booking]) -> List[StatusSlice]:
    statuses = [BookingStatus.normalize(booking.status) for booking in bookings]
    return [StatusSlice(name=name, value=statuses.count(name), color=color) for name, color in STATUS_COLORS.items()]


def build_report(hoardings: List[Hoarding], bookings: List[Booking], now: Optional[datetime] = None) -> ReportData:
    return ReportData(
        monthly_revenue=monthly_revenue(bookings, now),
        location_performance=location_performance(hoardings, bookings),
        booking_trends=booking_trends(bookings, now),
        status_distribution=status_distribution(bookings),
    )


class ReportsBuilder:
    _instance = None

    def __init__(self, bookings_db: Optional[BookingSystem] = None, hoardings_db: Optional[FirestoreHoardingsDB] = None):
        self.bookings_db = bookings_db or BookingSystem.shared()
        self.hoardings_db = hoardings_db or self.bookings_db.hoardings_db

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    @time_it
    async def get_report_data(self) -> StandardResponse:
        try:
            hoardings_response, bookings_response = await asyncio.gather(
                self.hoardings_db.get_all_hoardings(), self.bookings_db.get_all_bookings()
            )
            for response in (hoardings_response, bookings_response):
                if not response.status:
                    return response

            report = build_report(hoardings_response.data, bookings_response.data)
            return StandardResponse.success(data=report, message="Report data generated successfully")
        except Exception as e:
            return self._handle_error(e, "building report data")

    async def get_bookings_report(self, criteria: Optional[CalendarFilterCriteria] = None) -> StandardResponse:
        """Enriched bookings for the bookings report, narrowed by the calendar filters."""
        try:
            response = await self.bookings_db.get_enriched_bookings()
            if not response.status:
                return response
            bookings = response.data
            if criteria is not None:
                bookings = filter_calendar_bookings(bookings, criteria)
            return StandardResponse.success(data=bookings, message="Bookings report generated successfully")
        except Exception as e:
            return self._handle_error(e, "building bookings report")
