import asyncio
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Set

from google.cloud.firestore_v1.base_query import FieldFilter

from ..schemas.booking import BookingStatus
from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.keys import FireStoreKeys
from ..schemas.notification import Notification, NotificationCategory, NotificationInput, NotificationType
from ..utils.config import NOTIFICATION_RETENTION_DAYS
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription
from .users import sort_newest_first

NOTIFICATIONS_COLLECTION = DatabaseCollectionNames.NOTIFICATIONS_COLLECTION_NAME.value
CONTACT_MESSAGES_COLLECTION = DatabaseCollectionNames.CONTACT_MESSAGES_COLLECTION_NAME.value
BOOKINGS_COLLECTION = DatabaseCollectionNames.BOOKINGS_COLLECTION_NAME.value

MAX_BATCH_SIZE = 500
EXPIRY_WINDOW_DAYS = 7
NAVIGATE_ACTION = "navigate"


def _chunks(items: List[Any], size: int = MAX_BATCH_SIZE):
    for start in range(0, len(items), size):
        yield items[start : start + size]


class FirestoreNotificationsDB:
    """Admin notification feed stored in the notifications collection."""

    _instance = None

    def __init__(self, client=None, sync_client=None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.notifications_collection = self.client.collection(NOTIFICATIONS_COLLECTION)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    async def _handle_firestore_error(self, operation: str, error: Exception) -> StandardResponse:
        logger.error(f"❌ Firestore Error ({operation}): {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def _commit_in_batches(self, refs: List[Any], apply: Callable[[Any, Any], None]) -> int:
        for chunk in _chunks(refs):
            batch = self.client.batch()
            for ref in chunk:
                apply(batch, ref)
            await batch.commit()
        return len(refs)

    async def add_notification(self, notification: NotificationInput) -> StandardResponse:
        """
        Store a notification. With an explicit id an existing notification is left untouched,
        so a source event reported twice yields one notification and keeps its read flag.
        """
        try:
            if not notification.title or not notification.title.strip():
                return StandardResponse.bad_request("Title is required")

            doc_ref = self.notifications_collection.document(notification.id) if notification.id else self.notifications_collection.document()
            if notification.id:
                existing = await doc_ref.get()
                if existing.exists:
                    return StandardResponse.success(data=Notification.from_snapshot(existing), message="Notification already exists")

            data = notification.model_dump(by_alias=True, exclude={"id"}, mode="json")
            data.update({FireStoreKeys.read: False, FireStoreKeys.createdAt: TimeManager.get_utc_now()})
            await doc_ref.set(data)

            logger.info(f"🔔 Notification added: {doc_ref.id} ({notification.title})")
            return StandardResponse.success(data=Notification.from_document(doc_ref.id, data), message="Notification added", code=ErrorCodes.CREATED)
        except Exception as e:
            return await self._handle_firestore_error("add_notification", e)

    async def get_notifications(self, unread_only: bool = False) -> StandardResponse:
        try:
            query = self.notifications_collection
            if unread_only:
                query = query.where(filter=FieldFilter(FireStoreKeys.read, "==", False))
            notifications = [Notification.from_snapshot(doc) async for doc in query.stream()]
            return StandardResponse.success(data=sort_newest_first(notifications), message="Notifications fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_notifications", e)

    async def get_unread_count(self) -> StandardResponse:
        response = await self.get_notifications(unread_only=True)
        if not response.status:
            return response
        return StandardResponse.success(data={"unread": len(response.data)}, message="Unread count fetched")

    async def mark_as_read(self, notification_id: str) -> StandardResponse:
        try:
            if not notification_id:
                return StandardResponse.bad_request("Notification ID is required")

            doc_ref = self.notifications_collection.document(notification_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Notification not found")

            await doc_ref.update({FireStoreKeys.read: True})
            return StandardResponse.success(data=Notification.from_snapshot(doc).model_copy(update={"read": True}), message="Notification marked as read")
        except Exception as e:
            return await self._handle_firestore_error(f"mark_as_read '{notification_id}'", e)

    async def mark_all_as_read(self) -> StandardResponse:
        try:
            query = self.notifications_collection.where(filter=FieldFilter(FireStoreKeys.read, "==", False))
            refs = [doc.reference async for doc in query.stream()]
            count = await self._commit_in_batches(refs, lambda batch, ref: batch.update(ref, {FireStoreKeys.read: True}))
            return StandardResponse.success(data={"updated": count}, message="All notifications marked as read")
        except Exception as e:
            return await self._handle_firestore_error("mark_all_as_read", e)

    async def delete_notification(self, notification_id: str) -> StandardResponse:
        try:
            if not notification_id:
                return StandardResponse.bad_request("Notification ID is required")
            await self.notifications_collection.document(notification_id).delete()
            return StandardResponse.success(data={"id": notification_id}, message="Notification deleted")
        except Exception as e:
            return await self._handle_firestore_error(f"delete_notification '{notification_id}'", e)

    async def clear_all(self) -> StandardResponse:
        try:
            refs = [doc.reference async for doc in self.notifications_collection.stream()]
            count = await self._commit_in_batches(refs, lambda batch, ref: batch.delete(ref))
            logger.info(f"🧹 Cleared {count} notifications")
            return StandardResponse.success(data={"deleted": count}, message="All notifications cleared")
        except Exception as e:
            return await self._handle_firestore_error("clear_all", e)

    async def purge_older_than(self, days: int = NOTIFICATION_RETENTION_DAYS) -> StandardResponse:
        """Delete notifications created more than `days` days ago."""
        try:
            cutoff = TimeManager.get_utc_now() - timedelta(days=days)
            query = self.notifications_collection.where(filter=FieldFilter(FireStoreKeys.createdAt, "<", cutoff))
            refs = [doc.reference async for doc in query.stream()]
            count = await self._commit_in_batches(refs, lambda batch, ref: batch.delete(ref))
            if count:
                logger.info(f"🧹 Deleted {count} notifications older than {days} days")
            return StandardResponse.success(data={"deleted": count}, message="Old notifications deleted")
        except Exception as e:
            return await self._handle_firestore_error("purge_older_than", e)

    def subscribe(self, callback: Callable[[List[Notification]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(NOTIFICATIONS_COLLECTION),
            lambda items: callback(sort_newest_first([Notification.model_validate(item) for item in items])),
            on_error=on_error,
            name=NOTIFICATIONS_COLLECTION,
        )


def contact_message_notification(message_id: str, message: Dict[str, Any]) -> NotificationInput:
    return NotificationInput(
        id=f"contact_msg_{message_id}",
        type=NotificationType.INFO,
        category=NotificationCategory.CONTACT,
        title="📩 New Contact Message",
        message=f"{message.get('name') or 'Someone'} sent a message",
        action_type=NAVIGATE_ACTION,
        action_path="/admin/contacts",
        action_data={"messageId": message_id},
        source_collection=CONTACT_MESSAGES_COLLECTION,
        source_id=message_id,
    )


def pending_booking_notification(booking_id: str, booking: Dict[str, Any]) -> NotificationInput:
    return NotificationInput(
        id=f"booking_pending_{booking_id}",
        type=NotificationType.INFO,
        category=NotificationCategory.BOOKING,
        title="New Booking Request",
        message=f"New booking request for {booking.get('hoardingTitle') or 'hoarding'}",
        action_type=NAVIGATE_ACTION,
        action_path="/admin/bookings",
        action_data={"bookingId": booking_id, "filter": "pending"},
        source_collection=BOOKINGS_COLLECTION,
        source_id=booking_id,
    )


def expiring_booking_notification(booking_id: str, booking: Dict[str, Any], now=None) -> Optional[NotificationInput]:
    """A warning for an approved booking ending within the next week, None otherwise."""
    if BookingStatus.normalize(booking.get("status")) != BookingStatus.APPROVED.value:
        return None
    end_date = TimeManager.to_datetime(booking.get("endDate"))
    if end_date is None:
        return None

    now = now or TimeManager.get_utc_now()
    if not (now < end_date <= now + timedelta(days=EXPIRY_WINDOW_DAYS)):
        return None

    local_end = TimeManager.to_business_time(end_date)
    return NotificationInput(
        id=f"booking_expiry_{booking_id}",
        type=NotificationType.WARNING,
        category=NotificationCategory.BOOKING,
        title="Booking Expiring Soon",
        message=f"Booking for {booking.get('hoardingTitle') or 'hoarding'} expires on {local_end.strftime('%d/%m/%Y')}",
        action_type=NAVIGATE_ACTION,
        action_path="/admin/bookings",
        action_data={"bookingId": booking_id},
        source_collection=BOOKINGS_COLLECTION,
        source_id=booking_id,
    )


def _change_kind(change) -> str:
    kind = getattr(change, "type", "")
    return str(getattr(kind, "name", kind)).upper()


class ActivityNotifier:
    """
    Watches contact messages and bookings and files notifications for new activity.

    The first snapshot of each listener is the existing data and is skipped. Listener
    callbacks arrive on a background thread; the writes are scheduled on `loop`.
    """

    def __init__(self, notifications_db: FirestoreNotificationsDB, sync_client=None):
        self.notifications_db = notifications_db
        self._sync_client = sync_client
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._subscriptions: List[SnapshotSubscription] = []
        self._initial_seen: Set[str] = set()
        self._pending: Set[Any] = set()

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if self.running:
            return
        self._loop = loop or asyncio.get_running_loop()
        self._initial_seen.clear()
        sync_client = self._sync_client or FirestoreClient.shared_sync()

        self._subscriptions = [
            SnapshotSubscription(
                sync_client.collection(CONTACT_MESSAGES_COLLECTION),
                lambda items, changes: self._on_changes(CONTACT_MESSAGES_COLLECTION, changes),
                with_changes=True,
                name=f"{CONTACT_MESSAGES_COLLECTION} notifier",
            ),
            SnapshotSubscription(
                sync_client.collection(BOOKINGS_COLLECTION),
                lambda items, changes: self._on_changes(BOOKINGS_COLLECTION, changes),
                with_changes=True,
                name=f"{BOOKINGS_COLLECTION} notifier",
            ),
        ]
        logger.info("🔔 Activity notifier started")

    def _on_changes(self, source: str, changes):
        if source not in self._initial_seen:
            self._initial_seen.add(source)
            return

        for notification in self.notifications_for(source, changes):
            future = asyncio.run_coroutine_threadsafe(self.notifications_db.add_notification(notification), self._loop)
            self._pending.add(future)
            future.add_done_callback(self._pending.discard)

    @staticmethod
    def notifications_for(source: str, changes, now=None) -> List[NotificationInput]:
        notifications = []
        for change in changes or []:
            kind = _change_kind(change)
            doc_id = change.document.id
            data = change.document.to_dict() or {}

            if source == CONTACT_MESSAGES_COLLECTION:
                if kind == "ADDED":
                    notifications.append(contact_message_notification(doc_id, data))
                continue

            if kind == "REMOVED":
                continue
            if kind == "ADDED" and BookingStatus.normalize(data.get("status")) == BookingStatus.PENDING.value:
                notifications.append(pending_booking_notification(doc_id, data))
            expiring = expiring_booking_notification(doc_id, data, now)
            if expiring is not None:
                notifications.append(expiring)
        return notifications

    async def drain(self):
        """Wait for notification writes scheduled so far."""
        if self._pending:
            await asyncio.gather(*(asyncio.wrap_future(future) for future in list(self._pending)))

    def stop(self):
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        logger.info("🔕 Activity notifier stopped")
