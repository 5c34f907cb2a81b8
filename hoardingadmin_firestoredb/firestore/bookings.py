from typing import Any, Callable, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from ..schemas.booking import Booking, BookingStatus, EnrichedBooking, PaymentStatus
from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.customer import CustomerAggregate
from ..schemas.keys import FireStoreKeys
from ..utils.booking_enrichment import enrich_bookings
from ..utils.booking_filters import BookingFilterCriteria, filter_bookings
from ..utils.collection_state import CollectionState
from ..utils.customer_aggregator import aggregate_customers, booking_timestamp
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.status_policy import TransitionPolicy, validate_payment_status, validate_status_transition
from ..utils.time_it import time_it
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .hoardings import FirestoreHoardingsDB
from .subscriptions import SnapshotSubscription
from .users import FirestoreUsersDB

BOOKINGS_COLLECTION = DatabaseCollectionNames.BOOKINGS_COLLECTION_NAME.value


def sort_bookings(bookings: List[Booking]) -> List[Booking]:
    """Newest first by createdAt (startDate when missing); undated bookings last."""
    dated = [booking for booking in bookings if booking_timestamp(booking) is not None]
    undated = [booking for booking in bookings if booking_timestamp(booking) is None]
    return sorted(dated, key=booking_timestamp, reverse=True) + undated


class BookingSystem:
    """
    Read side and status transitions of bookings. Bookings are created by the public site;
    nothing here creates or deletes them.
    """

    _instance = None

    def __init__(
        self,
        client=None,
        sync_client=None,
        users_db: Optional[FirestoreUsersDB] = None,
        hoardings_db: Optional[FirestoreHoardingsDB] = None,
        policy: Optional[TransitionPolicy] = None,
    ):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.bookings_collection = self.client.collection(BOOKINGS_COLLECTION)
        self.users_db = users_db or FirestoreUsersDB(client=self.client, sync_client=sync_client)
        self.hoardings_db = hoardings_db or FirestoreHoardingsDB(client=self.client, sync_client=sync_client)
        self.policy = policy or TransitionPolicy.from_config()

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    async def _handle_firestore_error(self, operation: str, error: Exception) -> StandardResponse:
        logger.error(f"❌ Firestore Error ({operation}): {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def _stream(self, query) -> List[Booking]:
        return sort_bookings([Booking.from_snapshot(doc) async for doc in query.stream()])

    @time_it
    async def get_all_bookings(self) -> StandardResponse:
        try:
            bookings = await self._stream(self.bookings_collection)
            return StandardResponse.success(data=bookings, message="Bookings fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_all_bookings", e)

    async def get_bookings_by_status(self, status: str) -> StandardResponse:
        try:
            if not status:
                return StandardResponse.bad_request("Status is required")
            query = self.bookings_collection.where(filter=FieldFilter(FireStoreKeys.status, "==", BookingStatus.normalize(status)))
            return StandardResponse.success(data=await self._stream(query), message="Bookings fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"get_bookings_by_status '{status}'", e)

    async def get_bookings_by_user(self, user_id: str) -> StandardResponse:
        try:
            if not user_id:
                return StandardResponse.bad_request("User ID is required")
            query = self.bookings_collection.where(filter=FieldFilter(FireStoreKeys.userId, "==", user_id))
            return StandardResponse.success(data=await self._stream(query), message="Bookings fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"get_bookings_by_user '{user_id}'", e)

    async def get_booking(self, booking_id: str) -> StandardResponse:
        try:
            if not booking_id:
                return StandardResponse.bad_request("Booking ID is required")
            doc = await self.bookings_collection.document(booking_id).get()
            if not doc.exists:
                return StandardResponse.not_found("Booking not found")
            return StandardResponse.success(data=Booking.from_snapshot(doc), message="Booking retrieved successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"get_booking '{booking_id}'", e)

    async def enrich(self, bookings: List[Booking]) -> List[EnrichedBooking]:
        """Attach customer and hoarding display fields. Lookups that fail fall back to the placeholders."""
        resolve_hoarding = await self.hoardings_db.build_lookup()
        return await enrich_bookings(bookings, self.users_db.get_user_document, resolve_hoarding)

    @time_it
    async def get_enriched_bookings(self, criteria: Optional[BookingFilterCriteria] = None) -> StandardResponse:
        try:
            response = await self.get_all_bookings()
            if not response.status:
                return response

            enriched = await self.enrich(response.data)
            if criteria is not None:
                enriched = filter_bookings(enriched, criteria)
            return StandardResponse.success(data=enriched, message="Bookings fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_enriched_bookings", e)

    async def update_status(self, booking_id: str, status: str) -> StandardResponse:
        """
        Persist a new booking status with updatedAt. Writing the current value again is
        allowed and leaves the status unchanged. Concurrent writers are last-write-wins.
        """
        try:
            if not booking_id:
                return StandardResponse.bad_request("Booking ID is required")

            doc_ref = self.bookings_collection.document(booking_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Booking not found")

            booking = Booking.from_snapshot(doc)
            if rejection := validate_status_transition(booking.status, status, self.policy):
                return rejection

            new_status = BookingStatus.normalize(status)
            now = TimeManager.get_utc_now()
            await doc_ref.update({FireStoreKeys.status: new_status, FireStoreKeys.updatedAt: now})

            logger.info(f"✅ Booking {booking_id} status: {booking.status} → {new_status}")
            return StandardResponse.success(data=booking.model_copy(update={"status": new_status, "updated_at": now}), message=f"Booking {new_status.lower()}")
        except Exception as e:
            return await self._handle_firestore_error(f"update_status '{booking_id}'", e)

    async def update_payment_status(self, booking_id: str, payment_status: str) -> StandardResponse:
        try:
            if not booking_id:
                return StandardResponse.bad_request("Booking ID is required")
            if rejection := validate_payment_status(payment_status):
                return rejection

            doc_ref = self.bookings_collection.document(booking_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Booking not found")

            new_status = PaymentStatus.normalize(payment_status)
            now = TimeManager.get_utc_now()
            await doc_ref.update({FireStoreKeys.paymentStatus: new_status, FireStoreKeys.updatedAt: now})

            return StandardResponse.success(
                data=Booking.from_snapshot(doc).model_copy(update={"payment_status": new_status, "updated_at": now}), message="Payment status updated"
            )
        except Exception as e:
            return await self._handle_firestore_error(f"update_payment_status '{booking_id}'", e)

    def subscribe(self, callback: Callable[[List[Booking]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        """Raw bookings on every change. Enrich them with `enrich` from async code."""
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(BOOKINGS_COLLECTION),
            lambda items: callback(sort_bookings([Booking.model_validate(item) for item in items])),
            on_error=on_error,
            name=BOOKINGS_COLLECTION,
        )


class BookingsState(CollectionState[EnrichedBooking]):
    """Enriched bookings as the bookings screen holds them, with optimistic status changes."""

    def __init__(self, bookings_db: BookingSystem):
        super().__init__(bookings_db.get_enriched_bookings, name=BOOKINGS_COLLECTION)
        self.bookings_db = bookings_db

    async def change_status(self, booking_id: str, status: str) -> StandardResponse:
        return await self.optimistic_update(
            booking_id,
            {"status": BookingStatus.normalize(status)},
            lambda: self.bookings_db.update_status(booking_id, status),
        )

    async def change_payment_status(self, booking_id: str, payment_status: str) -> StandardResponse:
        return await self.optimistic_update(
            booking_id,
            {"payment_status": PaymentStatus.normalize(payment_status)},
            lambda: self.bookings_db.update_payment_status(booking_id, payment_status),
        )

    def filtered(self, criteria: BookingFilterCriteria) -> List[EnrichedBooking]:
        return filter_bookings(self.data, criteria)

    def customers(self) -> List[CustomerAggregate]:
        return aggregate_customers(self.data)
