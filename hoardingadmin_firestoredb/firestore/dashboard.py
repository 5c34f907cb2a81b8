import asyncio
import json
from typing import Any, Dict, List, Optional

from ..schemas.booking import BookingStatus, PaymentStatus
from ..schemas.dashboard_stats import DashboardStats
from ..utils.booking_filters import BookingFilterCriteria, HoardingFilterCriteria, filter_hoardings
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_it import time_it
from ..utils.time_now import TimeManager
from .bookings import BookingSystem
from .contact_messages import FirestoreContactMessagesDB
from .hoardings import FirestoreHoardingsDB
from .users import FirestoreUsersDB


def _unwrap(response: StandardResponse) -> Any:
    if not response.status:
        raise RuntimeError(response.error_message or response.message)
    return response.data


def _api(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.to_api() for item in items]


def monthly_revenue_of(bookings, now=None) -> float:
    """Sum of paid booking amounts created in the current business month."""
    now = TimeManager.to_business_time(now or TimeManager.get_utc_now())
    total = 0.0
    for booking in bookings:
        if PaymentStatus.normalize(booking.payment_status) != PaymentStatus.PAID.value:
            continue
        created = TimeManager.to_business_time(booking.created_at)
        if created is not None and (created.year, created.month) == (now.year, now.month):
            total += booking.amount or 0
    return total


# indexing: none, every section is a full collection read
class FirestoreDashboardDB:
    """Cross-collection reads for the dashboard: counters, a full data snapshot and search."""

    _instance = None

    def __init__(
        self,
        users_db: Optional[FirestoreUsersDB] = None,
        bookings_db: Optional[BookingSystem] = None,
        hoardings_db: Optional[FirestoreHoardingsDB] = None,
        messages_db: Optional[FirestoreContactMessagesDB] = None,
    ):
        self.users_db = users_db or FirestoreUsersDB.shared()
        self.hoardings_db = hoardings_db or FirestoreHoardingsDB.shared()
        self.bookings_db = bookings_db or BookingSystem(
            client=self.users_db.client, users_db=self.users_db, hoardings_db=self.hoardings_db
        )
        self.messages_db = messages_db or FirestoreContactMessagesDB(client=self.users_db.client)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def _load_all(self):
        responses = await asyncio.gather(
            self.users_db.get_all_users(),
            self.bookings_db.get_all_bookings(),
            self.hoardings_db.get_categories(),
            self.hoardings_db.get_all_hoardings(),
            self.messages_db.get_all_messages(),
        )
        return [_unwrap(response) for response in responses]

    @time_it
    async def get_dashboard_stats(self) -> StandardResponse:
        try:
            users, bookings, categories, hoardings, messages = await self._load_all()
            statuses = [BookingStatus.normalize(booking.status) for booking in bookings]

            stats = DashboardStats(
                total_hoardings=len(hoardings),
                total_customers=sum(1 for user in users if not user.is_admin),
                total_users=len(users),
                total_bookings=len(bookings),
                active_bookings=statuses.count(BookingStatus.APPROVED.value),
                pending_bookings=statuses.count(BookingStatus.PENDING.value),
                rejected_bookings=statuses.count(BookingStatus.REJECTED.value),
                monthly_revenue=monthly_revenue_of(bookings),
                total_categories=len(categories),
                active_categories=sum(1 for category in categories if category.active),
                total_messages=len(messages),
                unread_messages=sum(1 for message in messages if not message.read),
                generated_at=TimeManager.get_utc_now(),
            )
            logger.debug(f"📊 Dashboard stats: {stats.model_dump()}")
            return StandardResponse.success(data=stats, message="Dashboard statistics fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching dashboard statistics")

    @time_it
    async def fetch_all_data(self) -> StandardResponse:
        """Every admin collection as API dicts, keyed by collection, plus a timestamp."""
        try:
            users, bookings, categories, hoardings, messages = await self._load_all()
            data = {
                "users": _api(users),
                "bookings": _api(bookings),
                "categories": _api(categories),
                "hoardings": _api(hoardings),
                "contactMessages": _api(messages),
                "timestamp": TimeManager.get_utc_now().isoformat(),
            }
            logger.info(
                f"📥 Fetched {len(users)} users, {len(bookings)} bookings, {len(categories)} categories, "
                f"{len(hoardings)} hoardings and {len(messages)} messages"
            )
            return StandardResponse.success(data=data, message="All data fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching all data")

    async def export_backup_json(self) -> StandardResponse:
        response = await self.fetch_all_data()
        if not response.status:
            return response
        return StandardResponse.success(data=json.dumps(response.data, indent=2, default=str), message="Backup created successfully")

    async def search(self, term: str) -> StandardResponse:
        """Case-insensitive search over users, enriched bookings, hoardings and contact messages."""
        try:
            if not term or not term.strip():
                return StandardResponse.bad_request("Search term is required")
            needle = term.strip().lower()

            users_response, bookings_response, hoardings_response, messages_response = await asyncio.gather(
                self.users_db.search_users(needle),
                self.bookings_db.get_enriched_bookings(BookingFilterCriteria(search=needle)),
                self.hoardings_db.get_all_hoardings(),
                self.messages_db.get_all_messages(),
            )

            hoardings = filter_hoardings(_unwrap(hoardings_response), HoardingFilterCriteria(search=needle))
            messages = [
                message
                for message in _unwrap(messages_response)
                if any(needle in (value or "").lower() for value in (message.name, message.email, message.subject, message.message))
            ]
            results = {
                "users": _unwrap(users_response),
                "bookings": _unwrap(bookings_response),
                "hoardings": hoardings,
                "contactMessages": messages,
            }
            return StandardResponse.success(data=results, message="Search completed")
        except Exception as e:
            return self._handle_error(e, f"searching for '{term}'")
